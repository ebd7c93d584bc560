"""
Rent payment repository with due-date and ownership queries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, func, desc, asc
from sqlalchemy.orm import selectinload
from rental_api.repositories.base import BaseRepository
from rental_api.models.payment import RentPayment, PaymentStatus, PaymentType
from rental_api.models.lease import Lease
from rental_api.models.property import Property
from datetime import date
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int):
    """Return the first day of the month and the first day of the following month."""
    first = date(year, month, 1)
    following = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return first, following


class PaymentRepository(BaseRepository[RentPayment]):
    """Repository for rent payment lookups."""

    def __init__(self, db: AsyncSession):
        super().__init__(RentPayment, db)

    async def get_with_details(self, payment_id: uuid.UUID) -> Optional[RentPayment]:
        """Get payment with its lease, property and tenant loaded."""
        try:
            query = (
                select(RentPayment)
                .options(
                    selectinload(RentPayment.lease).selectinload(Lease.property_rel),
                    selectinload(RentPayment.lease).selectinload(Lease.tenant)
                )
                .where(RentPayment.id == payment_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get payment with details {payment_id}: {e}")
            raise

    async def list_by_lease(self, lease_id: uuid.UUID) -> List[RentPayment]:
        try:
            query = (
                select(RentPayment)
                .where(RentPayment.lease_id == lease_id)
                .order_by(asc(RentPayment.due_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get payments for lease {lease_id}: {e}")
            raise

    async def list_overdue(self, today: date) -> List[RentPayment]:
        """
        Pending payments whose due date has passed.

        Args:
            today: Reference day

        Returns:
            Overdue payments, oldest first
        """
        try:
            query = (
                select(RentPayment)
                .where(
                    and_(
                        RentPayment.status == PaymentStatus.PENDING,
                        RentPayment.due_date < today,
                    )
                )
                .order_by(asc(RentPayment.due_date))
            )
            result = await self.db.execute(query)
            payments = list(result.scalars().all())
            logger.debug(f"Found {len(payments)} overdue payments as of {today}")
            return payments
        except Exception as e:
            logger.error(f"Failed to get overdue payments: {e}")
            raise

    async def list_pending_due_on(self, due_date: date) -> List[RentPayment]:
        try:
            query = (
                select(RentPayment)
                .where(
                    and_(
                        RentPayment.status == PaymentStatus.PENDING,
                        RentPayment.due_date == due_date,
                    )
                )
                .order_by(asc(RentPayment.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get payments due on {due_date}: {e}")
            raise

    async def list_by_tenant(self, tenant_id: uuid.UUID) -> List[RentPayment]:
        try:
            query = (
                select(RentPayment)
                .join(Lease, RentPayment.lease_id == Lease.id)
                .where(Lease.tenant_id == tenant_id)
                .order_by(desc(RentPayment.due_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get payment history for tenant {tenant_id}: {e}")
            raise

    async def list_pending_by_tenant(self, tenant_id: uuid.UUID) -> List[RentPayment]:
        try:
            query = (
                select(RentPayment)
                .join(Lease, RentPayment.lease_id == Lease.id)
                .where(
                    and_(
                        Lease.tenant_id == tenant_id,
                        RentPayment.status == PaymentStatus.PENDING,
                    )
                )
                .order_by(asc(RentPayment.due_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get pending payments for tenant {tenant_id}: {e}")
            raise

    async def list_by_landlord(self, landlord_id: uuid.UUID) -> List[RentPayment]:
        try:
            query = (
                select(RentPayment)
                .join(Lease, RentPayment.lease_id == Lease.id)
                .join(Property, Lease.property_id == Property.id)
                .where(Property.landlord_id == landlord_id)
                .order_by(desc(RentPayment.due_date))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get payments for landlord {landlord_id}: {e}")
            raise

    async def rent_exists_for_month(self, lease_id: uuid.UUID, year: int, month: int) -> bool:
        """Check whether a rent record with a due date in the given month exists for the lease."""
        first, following = month_bounds(year, month)
        try:
            query = select(func.count(RentPayment.id)).where(
                and_(
                    RentPayment.lease_id == lease_id,
                    RentPayment.payment_type == PaymentType.RENT,
                    RentPayment.due_date >= first,
                    RentPayment.due_date < following,
                )
            )
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to check rent record for lease {lease_id} {year}-{month:02d}: {e}")
            raise
