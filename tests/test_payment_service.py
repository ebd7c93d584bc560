"""
Unit tests for the payment service.
Covers the payment lifecycle, slips, late fees, receipts, reminders and monthly rent generation.
"""

import io
import pytest
import uuid
from datetime import date, timedelta
from decimal import Decimal
from fastapi import UploadFile

from rental_api.config import settings
from rental_api.models.payment import PaymentStatus, PaymentType, RentPayment
from rental_api.services.notifications import NotificationService
from rental_api.services.payment import PaymentService, first_of_next_month
from rental_api.utils.exceptions import BadRequestError, NotFoundError, UnsupportedFileTypeError
from tests.conftest import (
    LeaseFactory,
    PaymentFactory,
    PropertyFactory,
    RecordingEmailService,
    make_image_bytes,
)


def slip(content: bytes = b"%PDF-1.4 slip", filename: str = "slip.pdf") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


class TestPaymentRecords:
    """Test cases for creating payment records."""

    @pytest.mark.asyncio
    async def test_create_rent_payment_schedules_reminder(self, payment_service, fake_scheduler, test_lease):
        """Rent payments get a reminder a few days before they fall due."""
        due = date.today() + timedelta(days=20)

        payment = await payment_service.create_payment_record(test_lease.id, 15000, due)

        assert payment.status == PaymentStatus.PENDING
        assert payment.payment_type == PaymentType.RENT
        assert payment.amount == Decimal("15000")
        assert payment.payment_method == "Unspecified"
        assert fake_scheduler.scheduled == [
            (payment.id, due - timedelta(days=settings.reminder_days_before))
        ]

    @pytest.mark.asyncio
    async def test_security_deposit_not_scheduled(self, payment_service, fake_scheduler, test_lease):
        payment = await payment_service.create_security_deposit_payment(
            test_lease.id, Decimal("40000"), date.today()
        )

        assert payment.payment_type == PaymentType.SECURITY_DEPOSIT
        assert fake_scheduler.scheduled == []

    @pytest.mark.asyncio
    async def test_no_scheduler_no_reminder(self, uow, storage, notifications, test_lease):
        """Without a scheduler the record is still created."""
        service = PaymentService(uow, storage=storage, notifications=notifications)

        payment = await service.create_payment_record(test_lease.id, 1000, date.today())
        assert payment.id is not None

    @pytest.mark.asyncio
    async def test_create_for_missing_lease(self, payment_service):
        with pytest.raises(NotFoundError):
            await payment_service.create_payment_record(uuid.uuid4(), 1000, date.today())

    @pytest.mark.asyncio
    async def test_get_missing_payment(self, payment_service):
        with pytest.raises(NotFoundError):
            await payment_service.get_payment(uuid.uuid4())


class TestPaymentStatus:
    """Test cases for status transitions."""

    @pytest.mark.asyncio
    async def test_mark_paid(self, payment_service, email_service, test_lease):
        """Paying stamps the date, records the method and confirms by email."""
        payment = await PaymentFactory.create_payment(uow=payment_service.uow, lease_id=test_lease.id)

        paid = await payment_service.update_payment_status(payment.id, PaymentStatus.PAID, "bKash")

        assert paid.status == PaymentStatus.PAID
        assert paid.payment_date is not None
        assert paid.payment_method == "bKash"
        assert email_service.subjects() == ["Payment Confirmation"]
        assert email_service.sent[0]["to"] == "tenant@test.com"

    @pytest.mark.asyncio
    async def test_paid_to_paid_is_noop(self, payment_service, email_service, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)
        first = await payment_service.update_payment_status(payment.id, PaymentStatus.PAID)
        paid_on = first.payment_date

        again = await payment_service.update_payment_status(payment.id, PaymentStatus.PAID)

        assert again.status == PaymentStatus.PAID
        assert again.payment_date == paid_on
        assert len(email_service.sent) == 1

    @pytest.mark.asyncio
    async def test_paid_is_terminal(self, payment_service, test_lease):
        payment = await PaymentFactory.create_payment(
            payment_service.uow, test_lease.id, status=PaymentStatus.PAID
        )

        with pytest.raises(BadRequestError, match="completed payment"):
            await payment_service.update_payment_status(payment.id, PaymentStatus.PENDING)

    @pytest.mark.asyncio
    async def test_overdue_cannot_be_set(self, payment_service, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)

        with pytest.raises(BadRequestError):
            await payment_service.update_payment_status(payment.id, PaymentStatus.OVERDUE)

    @pytest.mark.asyncio
    async def test_pending_to_pending_unchanged(self, payment_service, email_service, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)

        same = await payment_service.update_payment_status(payment.id, PaymentStatus.PENDING)

        assert same.status == PaymentStatus.PENDING
        assert same.payment_date is None
        assert email_service.sent == []

    @pytest.mark.asyncio
    async def test_confirmation_failure_does_not_block_payment(self, uow, storage, pdf_service, test_lease):
        """Email delivery is best-effort."""
        service = PaymentService(
            uow,
            storage=storage,
            notifications=NotificationService(RecordingEmailService(fail=True)),
            pdf_service=pdf_service
        )
        payment = await PaymentFactory.create_payment(uow, test_lease.id)

        paid = await service.update_payment_status(payment.id, PaymentStatus.PAID)
        assert paid.status == PaymentStatus.PAID


class TestPaymentSlips:
    """Test cases for slips and verification."""

    @pytest.mark.asyncio
    async def test_upload_slip(self, payment_service, storage, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)

        updated = await payment_service.upload_payment_slip(payment.id, slip())

        assert updated.slip_path.startswith("/storage/documents/")
        assert await storage.get_file_bytes(updated.slip_path) == b"%PDF-1.4 slip"

    @pytest.mark.asyncio
    async def test_replacing_slip_removes_previous_file(self, payment_service, storage, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)
        first = (await payment_service.upload_payment_slip(payment.id, slip())).slip_path

        second = (await payment_service.upload_payment_slip(payment.id, slip(make_image_bytes(), "slip.png"))).slip_path

        assert second != first
        assert await storage.get_file_bytes(first) is None
        assert await storage.get_file_bytes(second) is not None

    @pytest.mark.asyncio
    async def test_upload_slip_rejects_type(self, payment_service, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)

        with pytest.raises(UnsupportedFileTypeError):
            await payment_service.upload_payment_slip(payment.id, slip(b"MZ", "slip.exe"))

    @pytest.mark.asyncio
    async def test_verify_payment(self, payment_service, test_lease):
        """Verification needs both a completed payment and a slip."""
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)

        with pytest.raises(BadRequestError):
            await payment_service.verify_payment(payment.id)

        await payment_service.upload_payment_slip(payment.id, slip())
        with pytest.raises(BadRequestError):
            await payment_service.verify_payment(payment.id)

        await payment_service.update_payment_status(payment.id, PaymentStatus.PAID)
        assert await payment_service.verify_payment(payment.id) is True

    @pytest.mark.asyncio
    async def test_delete_unpaid_payment(self, payment_service, storage, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)
        slip_path = (await payment_service.upload_payment_slip(payment.id, slip())).slip_path

        await payment_service.delete_unpaid_payment(payment.id)

        with pytest.raises(NotFoundError):
            await payment_service.get_payment(payment.id)
        assert await storage.get_file_bytes(slip_path) is None

    @pytest.mark.asyncio
    async def test_delete_paid_payment_rejected(self, payment_service, test_lease):
        payment = await PaymentFactory.create_payment(
            payment_service.uow, test_lease.id, status=PaymentStatus.PAID
        )

        with pytest.raises(BadRequestError):
            await payment_service.delete_unpaid_payment(payment.id)


class TestLateFees:
    """Test cases for late fee calculation."""

    def test_late_fee_for_pending(self):
        payment = RentPayment(due_date=date(2025, 3, 1), status=PaymentStatus.PENDING)

        assert PaymentService.late_fee_for(payment, date(2025, 3, 1)) == 0.0
        assert PaymentService.late_fee_for(payment, date(2025, 3, 4)) == 3 * settings.late_fee_daily_rate

    def test_no_late_fee_when_paid(self):
        payment = RentPayment(due_date=date(2025, 3, 1), status=PaymentStatus.PAID)

        assert PaymentService.late_fee_for(payment, date(2025, 4, 1)) == 0.0

    @pytest.mark.asyncio
    async def test_calculate_late_fee(self, payment_service, test_lease):
        due = date.today() - timedelta(days=10)
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id, due_date=due)

        fee = await payment_service.calculate_late_fee(payment.id, date.today())
        assert fee == 10 * settings.late_fee_daily_rate


class TestPaymentQueries:
    """Test cases for payment listings."""

    @pytest.mark.asyncio
    async def test_queries(self, payment_service, test_lease, test_tenant, test_landlord):
        uow = payment_service.uow
        today = date.today()
        overdue = await PaymentFactory.create_payment(uow, test_lease.id, due_date=today - timedelta(days=3))
        upcoming = await PaymentFactory.create_payment(uow, test_lease.id, due_date=today + timedelta(days=3))
        paid = await PaymentFactory.create_payment(
            uow, test_lease.id, due_date=today - timedelta(days=30), status=PaymentStatus.PAID
        )

        assert [p.id for p in await payment_service.get_overdue_payments(today)] == [overdue.id]
        assert [p.id for p in await payment_service.get_payments_by_due_date(upcoming.due_date)] == [upcoming.id]
        assert {p.id for p in await payment_service.get_pending_payments_by_tenant(test_tenant.id)} == {overdue.id, upcoming.id}
        assert len(await payment_service.get_payment_history(test_tenant.id)) == 3
        assert len(await payment_service.get_payments_by_landlord(test_landlord.id)) == 3
        assert [p.id for p in await payment_service.get_payments_by_lease(test_lease.id)] == [paid.id, overdue.id, upcoming.id]


class TestReceipts:
    """Test cases for rent receipts."""

    @pytest.mark.asyncio
    async def test_receipt_for_paid_payment(self, payment_service, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)
        await payment_service.update_payment_status(payment.id, PaymentStatus.PAID, "Bank transfer")

        content = await payment_service.generate_rent_receipt(payment.id)
        assert content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_no_receipt_for_pending_payment(self, payment_service, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)

        with pytest.raises(BadRequestError):
            await payment_service.generate_rent_receipt(payment.id)


class TestReminders:
    """Test cases for reminder and overdue emails."""

    @pytest.mark.asyncio
    async def test_send_rent_reminder(self, payment_service, email_service, test_lease):
        payment = await PaymentFactory.create_payment(payment_service.uow, test_lease.id)

        assert await payment_service.send_rent_reminder(payment.id) is True
        assert email_service.subjects() == ["Rent Payment Reminder"]

    @pytest.mark.asyncio
    async def test_no_reminder_for_paid_or_missing(self, payment_service, email_service, test_lease):
        paid = await PaymentFactory.create_payment(
            payment_service.uow, test_lease.id, status=PaymentStatus.PAID
        )

        assert await payment_service.send_rent_reminder(paid.id) is False
        assert await payment_service.send_rent_reminder(uuid.uuid4()) is False
        assert email_service.sent == []

    @pytest.mark.asyncio
    async def test_send_overdue_reminder_mentions_fee(self, payment_service, email_service, test_lease):
        today = date.today()
        payment = await PaymentFactory.create_payment(
            payment_service.uow, test_lease.id, due_date=today - timedelta(days=2)
        )

        assert await payment_service.send_overdue_reminder(payment.id, today) is True
        assert email_service.subjects() == ["Overdue Rent Payment"]
        assert "1,000.00" in email_service.sent[0]["body"]


class TestMonthlyRentGeneration:
    """Test cases for generating next month's rent."""

    def test_first_of_next_month(self):
        assert first_of_next_month(date(2025, 1, 31)) == date(2025, 2, 1)
        assert first_of_next_month(date(2025, 12, 5)) == date(2026, 1, 1)

    @pytest.mark.asyncio
    async def test_generate_for_active_leases(self, payment_service, uow, test_landlord, test_tenant):
        """One rent record per covering active lease, due on the first of next month."""
        today = date(2030, 5, 20)
        covering = await LeaseFactory.create_lease(
            uow,
            (await PropertyFactory.create_property(uow, test_landlord.id, address="A")).id,
            test_tenant.id,
            start_date=date(2030, 1, 1),
            monthly_rent=Decimal("12000")
        )
        await LeaseFactory.create_lease(
            uow,
            (await PropertyFactory.create_property(uow, test_landlord.id, address="B")).id,
            test_tenant.id,
            start_date=date(2030, 1, 1),
            end_date=date(2030, 5, 31)
        )
        await LeaseFactory.create_lease(
            uow,
            (await PropertyFactory.create_property(uow, test_landlord.id, address="C")).id,
            test_tenant.id,
            start_date=date(2030, 1, 1),
            is_active=False
        )

        created = await payment_service.generate_monthly_rent_payments(today)

        assert len(created) == 1
        assert created[0].lease_id == covering.id
        assert created[0].due_date == date(2030, 6, 1)
        assert created[0].amount == Decimal("12000")

    @pytest.mark.asyncio
    async def test_generation_is_idempotent(self, payment_service, test_lease):
        today = date.today()

        first_run = await payment_service.generate_monthly_rent_payments(today)
        second_run = await payment_service.generate_monthly_rent_payments(today)

        assert len(first_run) == 1
        assert second_run == []

    @pytest.mark.asyncio
    async def test_generate_for_single_lease(self, payment_service, test_lease):
        today = date.today()

        payment = await payment_service.generate_rent_payment_for_lease(test_lease.id, today)
        assert payment.due_date == first_of_next_month(today)

        assert await payment_service.generate_rent_payment_for_lease(test_lease.id, today) is None

    @pytest.mark.asyncio
    async def test_generate_for_missing_lease(self, payment_service):
        with pytest.raises(NotFoundError):
            await payment_service.generate_rent_payment_for_lease(uuid.uuid4())


class TestPaymentScenario:
    """Rent cycle at the service layer."""

    @pytest.mark.asyncio
    async def test_rent_cycle(self, payment_service, email_service, test_lease):
        """Generate rent, go overdue, pay with a slip, verify and get a receipt."""
        due = first_of_next_month(date.today())
        payment = await payment_service.generate_rent_payment_for_lease(test_lease.id)

        late_day = due + timedelta(days=4)
        assert payment.effective_status(late_day) == PaymentStatus.OVERDUE
        assert await payment_service.calculate_late_fee(payment.id, late_day) == 4 * settings.late_fee_daily_rate

        await payment_service.upload_payment_slip(payment.id, slip())
        paid = await payment_service.update_payment_status(payment.id, PaymentStatus.PAID, "Cash")

        assert paid.effective_status(late_day) == PaymentStatus.PAID
        assert await payment_service.calculate_late_fee(payment.id, late_day) == 0.0
        assert await payment_service.verify_payment(payment.id) is True
        assert (await payment_service.generate_rent_receipt(payment.id)).startswith(b"%PDF")
        assert "Payment Confirmation" in email_service.subjects()
