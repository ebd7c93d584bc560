"""
Property repository for managing property listings with search and filtering.
Provides the named queries used by the property and lease services.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, func, desc, asc
from sqlalchemy.orm import selectinload
from rental_api.repositories.base import BaseRepository
from rental_api.models.property import Property
from typing import Optional, List, Tuple
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


SORT_FIELDS = {
    "rent": Property.rent_amount,
    "bedrooms": Property.bedrooms,
    "bathrooms": Property.bathrooms,
    "date": Property.created_at,
}


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        city: Optional[str] = None,
        min_rent: Optional[Decimal] = None,
        max_rent: Optional[Decimal] = None,
        bedrooms: Optional[int] = None,
        available_only: bool = True
    ):
        self.city = city
        self.min_rent = min_rent
        self.max_rent = max_rent
        self.bedrooms = bedrooms
        self.available_only = available_only


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property management with search capabilities.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def get_with_details(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get property with landlord, images and leases loaded.

        Args:
            property_id: UUID of the property

        Returns:
            Property with loaded relationships or None if not found
        """
        try:
            query = (
                select(Property)
                .options(
                    selectinload(Property.landlord),
                    selectinload(Property.images),
                    selectinload(Property.leases)
                )
                .where(Property.id == property_id)
                .execution_options(populate_existing=True)
            )

            result = await self.db.execute(query)
            property_obj = result.scalar_one_or_none()

            if property_obj:
                logger.debug(f"Retrieved property with details: {property_id}")

            return property_obj
        except Exception as e:
            logger.error(f"Failed to get property with details {property_id}: {e}")
            raise

    async def list_by_landlord(self, landlord_id: uuid.UUID) -> List[Property]:
        try:
            query = (
                select(Property)
                .where(Property.landlord_id == landlord_id)
                .order_by(desc(Property.created_at))
            )
            result = await self.db.execute(query)
            properties = list(result.scalars().all())
            logger.debug(f"Retrieved {len(properties)} properties for landlord {landlord_id}")
            return properties
        except Exception as e:
            logger.error(f"Failed to get properties for landlord {landlord_id}: {e}")
            raise

    async def search(
        self,
        filters: PropertySearchFilters,
        page: int = 1,
        page_size: int = 20,
        sort_by: str = "rent",
        sort_direction: str = "asc"
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering, sorting and pagination.

        Args:
            filters: PropertySearchFilters instance with search criteria
            page: 1-based page number
            page_size: Number of records per page
            sort_by: One of rent, bedrooms, bathrooms, date (falls back to rent)
            sort_direction: 'asc' or 'desc'

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            conditions = self._build_filter_conditions(filters)

            query = select(Property)
            count_query = select(func.count(Property.id))
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar()

            order_field = SORT_FIELDS.get((sort_by or "").lower(), Property.rent_amount)
            direction = desc if (sort_direction or "").lower() == "desc" else asc
            query = query.order_by(direction(order_field), asc(Property.id))

            query = query.offset((page - 1) * page_size).limit(page_size)

            result = await self.db.execute(query)
            properties = list(result.scalars().all())

            logger.debug(f"Property search returned {len(properties)} of {total_count} results")
            return properties, total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> list:
        conditions = []

        if filters.available_only:
            conditions.append(Property.is_available.is_(True))

        if filters.city:
            conditions.append(
                func.lower(Property.city).contains(filters.city.strip().lower(), autoescape=True)
            )

        if filters.min_rent is not None:
            conditions.append(Property.rent_amount >= filters.min_rent)

        if filters.max_rent is not None:
            conditions.append(Property.rent_amount <= filters.max_rent)

        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms == filters.bedrooms)

        return conditions

    async def is_owned_by(self, property_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        try:
            query = select(func.count(Property.id)).where(
                and_(Property.id == property_id, Property.landlord_id == user_id)
            )
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to check ownership of property {property_id}: {e}")
            raise

    async def has_properties(self, landlord_id: uuid.UUID) -> bool:
        try:
            query = select(func.count(Property.id)).where(Property.landlord_id == landlord_id)
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to count properties for landlord {landlord_id}: {e}")
            raise
