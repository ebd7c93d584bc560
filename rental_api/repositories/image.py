"""
Repository for PropertyImage model operations.
"""

import uuid
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rental_api.models.image import PropertyImage
from rental_api.repositories.base import BaseRepository


class ImageRepository(BaseRepository[PropertyImage]):
    """Repository for PropertyImage database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyImage, db)

    async def get_with_property(self, image_id: uuid.UUID) -> Optional[PropertyImage]:
        """
        Get an image together with the property it belongs to.

        Args:
            image_id: ID of the image

        Returns:
            Image with property loaded, or None
        """
        query = (
            select(PropertyImage)
            .options(selectinload(PropertyImage.property_rel))
            .where(PropertyImage.id == image_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_by_property(self, property_id: uuid.UUID) -> List[PropertyImage]:
        query = (
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.created_at.asc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
