"""
Payment service implementing the rent payment lifecycle.
Handles payment records, status transitions, slips, late fees, receipts and monthly rent generation.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Union
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from rental_api.config import settings
from rental_api.database import utcnow
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.repositories.payment import month_bounds
from rental_api.models.lease import Lease
from rental_api.models.payment import RentPayment, PaymentStatus, PaymentType
from rental_api.services.notifications import NotificationService
from rental_api.services.pdf import PdfService
from rental_api.services.storage import FileStorageService
from rental_api.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    BusinessRuleViolationError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


def first_of_next_month(today: date) -> date:
    _, following = month_bounds(today.year, today.month)
    return following


class PaymentService:
    """
    Payment lifecycle: pending -> paid. Paid is terminal; overdue is derived from the due date.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        storage: Optional[FileStorageService] = None,
        notifications: Optional[NotificationService] = None,
        scheduler=None,
        pdf_service: Optional[PdfService] = None
    ):
        self.uow = uow
        self.storage = storage or FileStorageService()
        self.notifications = notifications or NotificationService()
        self.scheduler = scheduler
        self.pdf_service = pdf_service or PdfService()

    @staticmethod
    def late_fee_for(payment: RentPayment, today: Optional[date] = None) -> float:
        """
        Late fee owed on a payment.

        Args:
            payment: Payment to evaluate
            today: Reference day, defaults to today

        Returns:
            0 for paid or not-yet-due payments, otherwise days late times the daily rate
        """
        if payment.is_paid:
            return 0.0
        days_late = payment.days_late(today or date.today())
        return float(days_late * settings.late_fee_daily_rate)

    async def get_payment(self, payment_id: uuid.UUID) -> RentPayment:
        payment = await self.uow.payments.get_with_details(payment_id)
        if not payment:
            raise NotFoundError("Payment", str(payment_id))
        return payment

    async def create_payment_record(
        self,
        lease_id: uuid.UUID,
        amount: Union[Decimal, float],
        due_date: date,
        payment_type: PaymentType = PaymentType.RENT,
        payment_method: str = "Unspecified"
    ) -> RentPayment:
        """
        Create a pending payment for a lease.

        Rent payments get a reminder scheduled a few days before the due date.

        Args:
            lease_id: Lease the payment belongs to
            amount: Amount due
            due_date: Day the payment falls due
            payment_type: Rent or security deposit
            payment_method: How the tenant intends to pay

        Returns:
            Created payment

        Raises:
            NotFoundError: If the lease doesn't exist
        """
        try:
            if not await self.uow.leases.exists(lease_id):
                raise NotFoundError("Lease", str(lease_id))

            payment = RentPayment(
                lease_id=lease_id,
                amount=Decimal(str(amount)),
                due_date=due_date,
                payment_type=payment_type,
                payment_method=payment_method or "Unspecified",
                status=PaymentStatus.PENDING,
            )
            self.uow.payments.add(payment)
            await self.uow.save_changes()

            logger.info(f"Created {payment_type.value} payment {payment.id} for lease {lease_id} due {due_date}")

            if payment_type == PaymentType.RENT and self.scheduler is not None:
                remind_on = due_date - timedelta(days=settings.reminder_days_before)
                self.scheduler.schedule_rent_reminder(payment.id, remind_on)

            return await self.get_payment(payment.id)

        except (APIException, SQLAlchemyError):
            raise
        except Exception as e:
            logger.error(f"Failed to create payment for lease {lease_id}: {e}")
            raise BadRequestError(f"Failed to create payment: {str(e)}")

    async def create_security_deposit_payment(
        self,
        lease_id: uuid.UUID,
        amount: Union[Decimal, float],
        due_date: date
    ) -> RentPayment:
        return await self.create_payment_record(
            lease_id, amount, due_date, payment_type=PaymentType.SECURITY_DEPOSIT
        )

    async def update_payment_status(
        self,
        payment_id: uuid.UUID,
        status: PaymentStatus,
        payment_method: Optional[str] = None
    ) -> RentPayment:
        """
        Move a payment to a new status.

        Paid is terminal: paid -> paid is a no-op, any other move away from paid fails.
        Marking paid stamps the payment date and emails the tenant a confirmation.

        Raises:
            NotFoundError: If the payment doesn't exist
            BadRequestError: If the payment is already paid, or overdue is requested
        """
        payment = await self.get_payment(payment_id)

        if status == PaymentStatus.OVERDUE:
            raise BadRequestError("Overdue status is derived from the due date and cannot be set")

        if payment.is_paid:
            if status == PaymentStatus.PAID:
                logger.debug(f"Payment {payment_id} already paid, nothing to do")
                return payment
            raise BusinessRuleViolationError("Cannot change status of completed payment")

        if status == PaymentStatus.PENDING:
            return payment

        payment.status = PaymentStatus.PAID
        payment.payment_date = utcnow()
        if payment_method:
            payment.payment_method = payment_method

        await self.uow.payments.update(payment)
        await self.uow.save_changes()
        logger.info(f"Payment {payment_id} marked as paid")

        await self.notifications.send_payment_confirmation(payment)
        return payment

    async def upload_payment_slip(self, payment_id: uuid.UUID, file: UploadFile) -> RentPayment:
        """
        Store a payment slip and attach it to the payment, replacing any previous slip.

        Raises:
            NotFoundError: If the payment doesn't exist
            BadRequestError: If the file is rejected
        """
        payment = await self.get_payment(payment_id)

        previous_slip = payment.slip_path
        new_slip = await self.storage.save_document(file)

        payment.slip_path = new_slip
        await self.uow.payments.update(payment)
        try:
            await self.uow.save_changes()
        except Exception:
            await self.storage.delete_file(new_slip)
            raise

        if previous_slip:
            try:
                await self.storage.delete_file(previous_slip)
            except Exception as e:
                logger.warning(f"Failed to delete previous slip {previous_slip}: {e}")

        logger.info(f"Slip uploaded for payment {payment_id}: {new_slip}")
        return payment

    async def calculate_late_fee(self, payment_id: uuid.UUID, today: Optional[date] = None) -> float:
        """
        Late fee for a payment as of today.

        Raises:
            NotFoundError: If the payment doesn't exist
        """
        payment = await self.get_payment(payment_id)
        return self.late_fee_for(payment, today)

    async def verify_payment(self, payment_id: uuid.UUID) -> bool:
        """
        Confirm a payment is paid and backed by a slip.

        Raises:
            NotFoundError: If the payment doesn't exist
            BadRequestError: If the payment is unpaid or has no slip
        """
        payment = await self.get_payment(payment_id)
        if not payment.is_paid or not payment.slip_path:
            raise BadRequestError("Payment is not completed or the payment slip is missing")
        logger.info(f"Payment {payment_id} verified")
        return True

    async def delete_unpaid_payment(self, payment_id: uuid.UUID) -> None:
        """
        Delete a payment that has not been paid.

        Raises:
            NotFoundError: If the payment doesn't exist
            BadRequestError: If the payment is already paid
        """
        payment = await self.get_payment(payment_id)
        if payment.is_paid:
            raise BusinessRuleViolationError("Cannot delete a completed payment")

        slip_path = payment.slip_path
        await self.uow.payments.remove(payment)
        await self.uow.save_changes()
        logger.info(f"Deleted unpaid payment {payment_id}")

        if slip_path:
            try:
                await self.storage.delete_file(slip_path)
            except Exception as e:
                logger.warning(f"Failed to delete slip {slip_path}: {e}")

    async def get_payments_by_lease(self, lease_id: uuid.UUID) -> List[RentPayment]:
        return await self.uow.payments.list_by_lease(lease_id)

    async def get_overdue_payments(self, today: Optional[date] = None) -> List[RentPayment]:
        return await self.uow.payments.list_overdue(today or date.today())

    async def get_payments_by_due_date(self, due_date: date) -> List[RentPayment]:
        return await self.uow.payments.list_pending_due_on(due_date)

    async def get_payment_history(self, tenant_id: uuid.UUID) -> List[RentPayment]:
        return await self.uow.payments.list_by_tenant(tenant_id)

    async def get_pending_payments_by_tenant(self, tenant_id: uuid.UUID) -> List[RentPayment]:
        return await self.uow.payments.list_pending_by_tenant(tenant_id)

    async def get_payments_by_landlord(self, landlord_id: uuid.UUID) -> List[RentPayment]:
        return await self.uow.payments.list_by_landlord(landlord_id)

    async def send_rent_reminder(self, payment_id: uuid.UUID) -> bool:
        """
        Email the tenant about an upcoming payment.

        Returns:
            True if a reminder went out; False if the payment is gone, already paid, or delivery failed
        """
        payment = await self.uow.payments.get_with_details(payment_id)
        if not payment:
            logger.info(f"Skipping reminder, payment {payment_id} no longer exists")
            return False
        if payment.is_paid:
            logger.info(f"Skipping reminder, payment {payment_id} is already paid")
            return False
        return await self.notifications.send_rent_reminder(payment)

    async def send_overdue_reminder(self, payment_id: uuid.UUID, today: Optional[date] = None) -> bool:
        payment = await self.uow.payments.get_with_details(payment_id)
        if not payment or payment.is_paid:
            return False
        return await self.notifications.send_overdue_notice(payment, self.late_fee_for(payment, today))

    async def generate_rent_receipt(self, payment_id: uuid.UUID) -> bytes:
        """
        Render a receipt PDF.

        Raises:
            NotFoundError: If the payment doesn't exist
            BadRequestError: If the payment is not paid yet
        """
        payment = await self.get_payment(payment_id)
        if not payment.is_paid:
            raise BadRequestError("Receipts are only available for completed payments")
        return self.pdf_service.generate_rent_receipt(payment)

    async def _create_rent_for_month(self, lease: Lease, due_date: date) -> Optional[RentPayment]:
        if not lease.is_active or not lease.covers(due_date):
            return None
        if await self.uow.payments.rent_exists_for_month(lease.id, due_date.year, due_date.month):
            return None
        return await self.create_payment_record(lease.id, lease.monthly_rent, due_date)

    async def generate_rent_payment_for_lease(
        self,
        lease_id: uuid.UUID,
        today: Optional[date] = None
    ) -> Optional[RentPayment]:
        """
        Create next month's rent record for one lease.

        Returns:
            The new payment, or None when the lease is inactive, does not cover the
            first of next month, or already has a rent record for that month

        Raises:
            NotFoundError: If the lease doesn't exist
        """
        lease = await self.uow.leases.get_by_id(lease_id)
        if not lease:
            raise NotFoundError("Lease", str(lease_id))
        return await self._create_rent_for_month(lease, first_of_next_month(today or date.today()))

    async def generate_monthly_rent_payments(self, today: Optional[date] = None) -> List[RentPayment]:
        """
        Create next month's rent records for every active lease.

        Args:
            today: Reference day, defaults to today

        Returns:
            Payments created by this run
        """
        due_date = first_of_next_month(today or date.today())
        created = []
        for lease in await self.uow.leases.list_active():
            payment = await self._create_rent_for_month(lease, due_date)
            if payment is not None:
                created.append(payment)

        logger.info(f"Generated {len(created)} rent payments due {due_date}")
        return created
