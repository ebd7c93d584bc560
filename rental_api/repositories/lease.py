"""
Lease repository with the overlap query and tenant/property listings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc
from sqlalchemy.orm import selectinload
from rental_api.repositories.base import BaseRepository
from rental_api.models.lease import Lease
from datetime import date
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class LeaseRepository(BaseRepository[Lease]):
    """Repository for lease lookups."""

    def __init__(self, db: AsyncSession):
        super().__init__(Lease, db)

    async def get_with_details(self, lease_id: uuid.UUID) -> Optional[Lease]:
        """
        Get lease with property, tenant and payments loaded.

        Args:
            lease_id: UUID of the lease

        Returns:
            Lease or None if not found
        """
        try:
            query = (
                select(Lease)
                .options(
                    selectinload(Lease.property_rel),
                    selectinload(Lease.tenant),
                    selectinload(Lease.payments)
                )
                .where(Lease.id == lease_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get lease with details {lease_id}: {e}")
            raise

    async def has_overlapping_lease(
        self,
        property_id: uuid.UUID,
        start_date: date,
        end_date: Optional[date],
        exclude_lease_id: Optional[uuid.UUID] = None
    ) -> bool:
        """
        Check whether a lease on the property intersects [start_date, end_date].

        A missing end date on either side means the interval never ends. Ended
        leases keep occupying the days they ran; a lease ended before its start
        date occupies none.

        Args:
            property_id: Property to check
            start_date: Start of the candidate interval
            end_date: End of the candidate interval or None
            exclude_lease_id: Lease to ignore (the one being changed)

        Returns:
            True if an overlapping lease exists
        """
        try:
            conditions = [
                Lease.property_id == property_id,
                or_(Lease.end_date.is_(None), Lease.end_date >= start_date),
                or_(Lease.end_date.is_(None), Lease.end_date >= Lease.start_date),
            ]
            if end_date is not None:
                conditions.append(Lease.start_date <= end_date)
            if exclude_lease_id is not None:
                conditions.append(Lease.id != exclude_lease_id)

            query = select(func.count(Lease.id)).where(and_(*conditions))
            result = await self.db.execute(query)
            overlapping = result.scalar() > 0
            logger.debug(f"Overlap check for property {property_id} [{start_date}, {end_date}]: {overlapping}")
            return overlapping
        except Exception as e:
            logger.error(f"Failed to check lease overlap for property {property_id}: {e}")
            raise

    async def list_by_tenant(self, tenant_id: uuid.UUID) -> List[Lease]:
        try:
            query = (
                select(Lease)
                .where(Lease.tenant_id == tenant_id)
                .order_by(desc(Lease.start_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get leases for tenant {tenant_id}: {e}")
            raise

    async def get_active_for_tenant(self, tenant_id: uuid.UUID, today: date) -> Optional[Lease]:
        """Most recent active lease of the tenant that has not run out."""
        try:
            query = (
                select(Lease)
                .where(
                    and_(
                        Lease.tenant_id == tenant_id,
                        Lease.is_active.is_(True),
                        or_(Lease.end_date.is_(None), Lease.end_date >= today),
                    )
                )
                .order_by(desc(Lease.start_date))
                .limit(1)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get active lease for tenant {tenant_id}: {e}")
            raise

    async def list_by_property(self, property_id: uuid.UUID) -> List[Lease]:
        try:
            query = (
                select(Lease)
                .where(Lease.property_id == property_id)
                .order_by(desc(Lease.start_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get leases for property {property_id}: {e}")
            raise

    async def list_active(self) -> List[Lease]:
        try:
            query = select(Lease).where(Lease.is_active.is_(True)).order_by(Lease.start_date)
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list active leases: {e}")
            raise

    async def tenant_has_leases(self, tenant_id: uuid.UUID) -> bool:
        try:
            query = select(func.count(Lease.id)).where(Lease.tenant_id == tenant_id)
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to count leases for tenant {tenant_id}: {e}")
            raise
