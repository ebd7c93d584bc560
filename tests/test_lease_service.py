"""
Unit tests for the lease service.
Covers the lease rules, the atomic create, ending, renewal and agreement documents.
"""

import pytest
import uuid
from datetime import date, timedelta
from decimal import Decimal

from rental_api.models.payment import PaymentType, PaymentStatus
from rental_api.models.user import UserRole
from rental_api.schemas.lease import LeaseCreate
from rental_api.utils.exceptions import (
    BadRequestError,
    LeaseOverlapError,
    NotFoundError,
    BusinessRuleViolationError,
    PropertyOwnershipError,
)
from tests.conftest import UserFactory, PropertyFactory, LeaseFactory


def lease_terms(start: date, end=None, **extra) -> LeaseCreate:
    return LeaseCreate(start_date=start, end_date=end, **extra)


class TestCreateLease:
    """Test cases for LeaseService.create_lease."""

    @pytest.mark.asyncio
    async def test_create_lease(self, lease_service, uow, test_property, test_tenant, test_landlord):
        """Test a lease is created and the property is taken off the market."""
        start = date.today()
        lease = await lease_service.create_lease(
            lease_terms(start, start + timedelta(days=364)),
            test_property.id,
            test_tenant.id,
            test_landlord
        )

        assert lease.id is not None
        assert lease.is_active is True
        assert lease.monthly_rent == test_property.rent_amount
        assert lease.tenant.id == test_tenant.id

        property_obj = await uow.properties.get_with_details(test_property.id)
        assert property_obj.is_available is False

    @pytest.mark.asyncio
    async def test_create_lease_with_custom_rent(self, lease_service, test_property, test_tenant):
        lease = await lease_service.create_lease(
            lease_terms(date.today(), monthly_rent=Decimal("18500")), test_property.id, test_tenant.id
        )

        assert lease.monthly_rent == Decimal("18500")
        assert lease.end_date is None

    @pytest.mark.asyncio
    async def test_security_deposit_payment_created(self, lease_service, uow, test_landlord, test_tenant, fake_scheduler):
        """A deposit on the property becomes a pending payment due on the start date."""
        property_obj = await PropertyFactory.create_property(
            uow, test_landlord.id, security_deposit=Decimal("40000")
        )
        start = date.today() + timedelta(days=7)

        lease = await lease_service.create_lease(lease_terms(start), property_obj.id, test_tenant.id)

        payments = await uow.payments.list_by_lease(lease.id)
        assert len(payments) == 1
        deposit = payments[0]
        assert deposit.payment_type == PaymentType.SECURITY_DEPOSIT
        assert deposit.amount == Decimal("40000")
        assert deposit.due_date == start
        assert deposit.status == PaymentStatus.PENDING
        assert fake_scheduler.scheduled == []

    @pytest.mark.asyncio
    async def test_no_deposit_no_payment(self, lease_service, uow, test_property, test_tenant):
        lease = await lease_service.create_lease(lease_terms(date.today()), test_property.id, test_tenant.id)

        assert await uow.payments.list_by_lease(lease.id) == []

    @pytest.mark.asyncio
    async def test_unavailable_property(self, lease_service, uow, test_landlord, test_tenant):
        property_obj = await PropertyFactory.create_property(uow, test_landlord.id, is_available=False)

        with pytest.raises(BadRequestError, match="not available"):
            await lease_service.create_lease(lease_terms(date.today()), property_obj.id, test_tenant.id)

    @pytest.mark.asyncio
    async def test_missing_property(self, lease_service, test_tenant):
        with pytest.raises(BadRequestError, match="not available"):
            await lease_service.create_lease(lease_terms(date.today()), uuid.uuid4(), test_tenant.id)

    @pytest.mark.asyncio
    async def test_other_landlord_cannot_lease(self, lease_service, test_property, test_tenant, other_landlord):
        with pytest.raises(PropertyOwnershipError):
            await lease_service.create_lease(
                lease_terms(date.today()), test_property.id, test_tenant.id, other_landlord
            )

    @pytest.mark.asyncio
    async def test_tenant_must_be_tenant(self, lease_service, test_property, other_landlord):
        with pytest.raises(BadRequestError, match="Invalid tenant"):
            await lease_service.create_lease(lease_terms(date.today()), test_property.id, other_landlord.id)

    @pytest.mark.asyncio
    async def test_missing_tenant(self, lease_service, test_property):
        with pytest.raises(BadRequestError, match="Invalid tenant"):
            await lease_service.create_lease(lease_terms(date.today()), test_property.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_tenant_must_be_verified(self, lease_service, uow, test_property):
        unverified = await UserFactory.create_user(uow, role=UserRole.TENANT, is_nid_verified=False)

        with pytest.raises(BadRequestError, match="NID"):
            await lease_service.create_lease(lease_terms(date.today()), test_property.id, unverified.id)

    @pytest.mark.asyncio
    async def test_overlapping_lease_rejected(self, lease_service, uow, test_property, test_tenant):
        """An ended lease still blocks its days even though the property is available."""
        await LeaseFactory.create_lease(
            uow, test_property.id, test_tenant.id,
            start_date=date(2030, 1, 1), end_date=date(2030, 6, 30), is_active=False
        )

        with pytest.raises(LeaseOverlapError):
            await lease_service.create_lease(
                lease_terms(date(2030, 6, 1), date(2030, 12, 31)), test_property.id, test_tenant.id
            )

        lease = await lease_service.create_lease(
            lease_terms(date(2030, 7, 1), date(2030, 12, 31)), test_property.id, test_tenant.id
        )
        assert lease.start_date == date(2030, 7, 1)

    @pytest.mark.asyncio
    async def test_overlap_with_later_lease_rejected(self, lease_service, uow, test_property, test_tenant):
        """A new lease reaching into a lease booked further ahead is rejected too."""
        await LeaseFactory.create_lease(
            uow, test_property.id, test_tenant.id,
            start_date=date(2030, 7, 1), end_date=date(2030, 12, 31), is_active=False
        )

        with pytest.raises(LeaseOverlapError):
            await lease_service.create_lease(
                lease_terms(date(2030, 1, 1), date(2030, 7, 1)), test_property.id, test_tenant.id
            )

        with pytest.raises(LeaseOverlapError):
            await lease_service.create_lease(lease_terms(date(2030, 1, 1)), test_property.id, test_tenant.id)

        lease = await lease_service.create_lease(
            lease_terms(date(2030, 1, 1), date(2030, 6, 30)), test_property.id, test_tenant.id
        )
        assert lease.end_date == date(2030, 6, 30)

    @pytest.mark.asyncio
    async def test_failed_create_rolls_back(self, lease_service, uow, payment_service, test_landlord, test_tenant):
        """If the deposit payment fails, neither the lease nor the availability change is kept."""
        property_obj = await PropertyFactory.create_property(
            uow, test_landlord.id, security_deposit=Decimal("40000")
        )
        property_id = property_obj.id

        async def failing_deposit(*args, **kwargs):
            raise RuntimeError("payment store unavailable")

        payment_service.create_security_deposit_payment = failing_deposit

        with pytest.raises(BadRequestError, match="Failed to create lease"):
            await lease_service.create_lease(lease_terms(date.today()), property_id, test_tenant.id)

        assert await uow.leases.list_by_property(property_id) == []
        refreshed = await uow.properties.get_with_details(property_id)
        assert refreshed.is_available is True
        assert not uow.in_transaction


class TestLeaseLifecycle:
    """Test cases for ending and renewing leases."""

    @pytest.fixture
    async def active_lease(self, lease_service, test_property, test_tenant):
        start = date.today() - timedelta(days=60)
        return await lease_service.create_lease(
            lease_terms(start, start + timedelta(days=364)), test_property.id, test_tenant.id
        )

    @pytest.mark.asyncio
    async def test_end_lease(self, lease_service, uow, active_lease, test_landlord):
        """Ending sets today's date and frees the property."""
        ended = await lease_service.end_lease(active_lease.id, test_landlord)

        assert ended.is_active is False
        assert ended.end_date == date.today()
        property_obj = await uow.properties.get_with_details(active_lease.property_id)
        assert property_obj.is_available is True

    @pytest.mark.asyncio
    async def test_end_lease_requires_owner(self, lease_service, active_lease, other_landlord):
        with pytest.raises(PropertyOwnershipError):
            await lease_service.end_lease(active_lease.id, other_landlord)

    @pytest.mark.asyncio
    async def test_end_missing_lease(self, lease_service):
        with pytest.raises(NotFoundError):
            await lease_service.end_lease(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_ended_lease_cannot_be_ended_again(self, lease_service, uow, test_landlord, test_tenant):
        """Ending twice must not drag the old lease over the one that followed it."""
        property_obj = await PropertyFactory.create_property(uow, test_landlord.id)
        old = await LeaseFactory.create_lease(
            uow, property_obj.id, test_tenant.id,
            start_date=date.today() - timedelta(days=90),
            end_date=date.today() - timedelta(days=30),
            is_active=False
        )
        current = await lease_service.create_lease(
            lease_terms(date.today() - timedelta(days=20), date.today() + timedelta(days=100)),
            property_obj.id, test_tenant.id
        )

        with pytest.raises(BusinessRuleViolationError):
            await lease_service.end_lease(old.id)

        old = await lease_service.get_lease(old.id)
        assert old.end_date == date.today() - timedelta(days=30)
        refreshed = await uow.properties.get_with_details(property_obj.id)
        assert refreshed.is_available is False
        assert (await lease_service.get_lease(current.id)).is_active is True

    @pytest.mark.asyncio
    async def test_ended_lease_cannot_be_renewed(self, lease_service, uow, active_lease, test_landlord):
        await lease_service.end_lease(active_lease.id, test_landlord)

        with pytest.raises(BusinessRuleViolationError):
            await lease_service.renew_lease(active_lease.id, date.today() + timedelta(days=90), test_landlord)

        lease = await lease_service.get_lease(active_lease.id)
        assert lease.is_active is False
        assert lease.end_date == date.today()
        property_obj = await uow.properties.get_with_details(active_lease.property_id)
        assert property_obj.is_available is True

    @pytest.mark.asyncio
    async def test_renew_lease(self, lease_service, active_lease):
        new_end = active_lease.end_date + timedelta(days=365)

        renewed = await lease_service.renew_lease(active_lease.id, new_end)

        assert renewed.end_date == new_end
        assert renewed.is_active is True

    @pytest.mark.asyncio
    async def test_renew_must_extend(self, lease_service, active_lease):
        with pytest.raises(BadRequestError):
            await lease_service.renew_lease(active_lease.id, active_lease.end_date)

    @pytest.mark.asyncio
    async def test_renew_into_next_lease_rejected(self, lease_service, uow, active_lease, test_tenant):
        """Extending into the next booked interval is an overlap."""
        await LeaseFactory.create_lease(
            uow, active_lease.property_id, test_tenant.id,
            start_date=active_lease.end_date + timedelta(days=30),
            end_date=active_lease.end_date + timedelta(days=400),
        )

        with pytest.raises(LeaseOverlapError):
            await lease_service.renew_lease(active_lease.id, active_lease.end_date + timedelta(days=60))

    @pytest.mark.asyncio
    async def test_renew_open_ended_uses_start_date(self, lease_service, uow, test_property, test_tenant):
        lease = await LeaseFactory.create_lease(
            uow, test_property.id, test_tenant.id, start_date=date(2030, 1, 1)
        )

        with pytest.raises(BadRequestError):
            await lease_service.renew_lease(lease.id, date(2030, 1, 1))

        renewed = await lease_service.renew_lease(lease.id, date(2030, 12, 31))
        assert renewed.end_date == date(2030, 12, 31)


class TestLeaseQueries:
    """Test cases for lease lookups and documents."""

    @pytest.mark.asyncio
    async def test_get_missing_lease(self, lease_service):
        with pytest.raises(NotFoundError):
            await lease_service.get_lease(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_active_lease_by_tenant(self, lease_service, test_lease, test_tenant):
        lease = await lease_service.get_active_lease_by_tenant(test_tenant.id)
        assert lease.id == test_lease.id

        with pytest.raises(NotFoundError):
            await lease_service.get_active_lease_by_tenant(test_tenant.id, today=date.today() + timedelta(days=400))

    @pytest.mark.asyncio
    async def test_lists(self, lease_service, test_lease, test_tenant, test_property):
        assert [lease.id for lease in await lease_service.get_leases_by_tenant(test_tenant.id)] == [test_lease.id]
        assert [lease.id for lease in await lease_service.get_leases_by_property(test_property.id)] == [test_lease.id]

    @pytest.mark.asyncio
    async def test_generate_lease_document(self, lease_service, storage, test_lease):
        """The agreement is stored as a PDF and its path recorded on the lease."""
        path = await lease_service.generate_lease_document(test_lease.id)

        assert path == f"/storage/leases/lease_{test_lease.id}.pdf"
        content = await storage.get_file_bytes(path)
        assert content.startswith(b"%PDF")

        lease = await lease_service.get_lease(test_lease.id)
        assert lease.document_path == path


class TestLeaseScenario:
    """End-to-end lease scenario at the service layer."""

    @pytest.mark.asyncio
    async def test_lease_end_and_relet(self, lease_service, uow, test_landlord, test_tenant):
        """Lease a property, end it, then let it again after the ended interval."""
        property_obj = await PropertyFactory.create_property(uow, test_landlord.id)
        second_tenant = await UserFactory.create_user(uow, role=UserRole.TENANT, is_nid_verified=True)

        first = await lease_service.create_lease(
            lease_terms(date.today() - timedelta(days=30)), property_obj.id, test_tenant.id, test_landlord
        )

        # Property is off the market while leased
        with pytest.raises(BadRequestError):
            await lease_service.create_lease(
                lease_terms(date.today() + timedelta(days=1)), property_obj.id, second_tenant.id, test_landlord
            )

        await lease_service.end_lease(first.id, test_landlord)

        # Today is still taken by the ended lease
        with pytest.raises(LeaseOverlapError):
            await lease_service.create_lease(
                lease_terms(date.today()), property_obj.id, second_tenant.id, test_landlord
            )

        second = await lease_service.create_lease(
            lease_terms(date.today() + timedelta(days=1)), property_obj.id, second_tenant.id, test_landlord
        )
        assert second.is_active is True
        assert len(await lease_service.get_leases_by_property(property_obj.id)) == 2
