"""
Maintenance request repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from sqlalchemy.orm import selectinload
from rental_api.repositories.base import BaseRepository
from rental_api.models.maintenance import MaintenanceRequest
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class MaintenanceRepository(BaseRepository[MaintenanceRequest]):
    """Repository for maintenance request lookups."""

    def __init__(self, db: AsyncSession):
        super().__init__(MaintenanceRequest, db)

    async def get_with_details(self, request_id: uuid.UUID) -> Optional[MaintenanceRequest]:
        try:
            query = (
                select(MaintenanceRequest)
                .options(
                    selectinload(MaintenanceRequest.property_rel),
                    selectinload(MaintenanceRequest.tenant)
                )
                .where(MaintenanceRequest.id == request_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get maintenance request {request_id}: {e}")
            raise

    async def list_by_tenant(self, tenant_id: uuid.UUID) -> List[MaintenanceRequest]:
        try:
            query = (
                select(MaintenanceRequest)
                .where(MaintenanceRequest.tenant_id == tenant_id)
                .order_by(desc(MaintenanceRequest.request_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get maintenance requests for tenant {tenant_id}: {e}")
            raise

    async def list_by_property(self, property_id: uuid.UUID) -> List[MaintenanceRequest]:
        try:
            query = (
                select(MaintenanceRequest)
                .where(MaintenanceRequest.property_id == property_id)
                .order_by(desc(MaintenanceRequest.request_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get maintenance requests for property {property_id}: {e}")
            raise

    async def tenant_has_requests(self, tenant_id: uuid.UUID) -> bool:
        try:
            query = select(func.count(MaintenanceRequest.id)).where(MaintenanceRequest.tenant_id == tenant_id)
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to count maintenance requests for tenant {tenant_id}: {e}")
            raise
