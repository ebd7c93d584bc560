"""
Base repository class with common CRUD operations using async SQLAlchemy.
Repositories only queue changes on the session; the unit of work commits them.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from rental_api.database import Base
from typing import TypeVar, Generic, Optional, List, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Named queries live on the aggregate-specific subclasses.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: UUID of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        try:
            query = (
                select(self.model)
                .where(self.model.id == id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            obj = result.scalar_one_or_none()

            if obj:
                logger.debug(f"Retrieved {self.model.__name__} with id: {id}")
            else:
                logger.debug(f"{self.model.__name__} with id {id} not found")

            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def get_all(self) -> List[ModelType]:
        """
        Get every record, newest first.

        Returns:
            List of model instances
        """
        try:
            query = select(self.model).order_by(self.model.created_at.desc())
            result = await self.db.execute(query)
            objects = list(result.scalars().all())
            logger.debug(f"Retrieved {len(objects)} {self.model.__name__} records")
            return objects
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} records: {e}")
            raise

    async def exists(self, id: uuid.UUID) -> bool:
        """
        Check if a record exists by its ID.

        Args:
            id: UUID of the record to check

        Returns:
            True if record exists, False otherwise
        """
        try:
            query = select(func.count(self.model.id)).where(self.model.id == id)
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to check existence of {self.model.__name__} {id}: {e}")
            raise

    async def count(self) -> int:
        try:
            result = await self.db.execute(select(func.count(self.model.id)))
            return result.scalar()
        except Exception as e:
            logger.error(f"Failed to count {self.model.__name__} records: {e}")
            raise

    def add(self, entity: ModelType) -> ModelType:
        """
        Queue a new entity for insertion.

        Args:
            entity: Transient model instance

        Returns:
            The same instance, now pending in the session
        """
        self.db.add(entity)
        logger.debug(f"Queued new {self.model.__name__}")
        return entity

    def add_all(self, entities: List[ModelType]) -> List[ModelType]:
        self.db.add_all(entities)
        logger.debug(f"Queued {len(entities)} new {self.model.__name__} records")
        return entities

    async def update(self, entity: ModelType) -> ModelType:
        """
        Mark an entity as modified.

        Attribute changes on a persistent instance are tracked by the session already;
        merging covers detached instances.
        """
        if entity not in self.db:
            entity = await self.db.merge(entity)
        logger.debug(f"Queued update for {self.model.__name__} {entity.id}")
        return entity

    async def remove(self, entity: ModelType) -> None:
        """
        Queue an entity for deletion.

        Args:
            entity: Persistent model instance
        """
        await self.db.delete(entity)
        logger.debug(f"Queued deletion of {self.model.__name__} {entity.id}")
