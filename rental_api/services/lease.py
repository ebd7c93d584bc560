"""
Lease service managing the lease lifecycle: create, end, renew and agreement documents.
"""

from datetime import date
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.models.lease import Lease
from rental_api.models.property import Property
from rental_api.models.user import User
from rental_api.schemas.lease import LeaseCreate
from rental_api.services.payment import PaymentService
from rental_api.services.pdf import PdfService
from rental_api.services.storage import FileStorageService
from rental_api.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    BusinessRuleViolationError,
    LeaseOverlapError,
    PropertyOwnershipError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class LeaseService:
    """
    Lease lifecycle: no lease -> active -> ended, with renewals keeping a lease active.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        payment_service: Optional[PaymentService] = None,
        storage: Optional[FileStorageService] = None,
        pdf_service: Optional[PdfService] = None
    ):
        self.uow = uow
        self.storage = storage or FileStorageService()
        self.pdf_service = pdf_service or PdfService()
        self.payment_service = payment_service or PaymentService(
            uow, storage=self.storage, pdf_service=self.pdf_service
        )

    @staticmethod
    def _ensure_can_manage(property_obj: Property, current_user: Optional[User]) -> None:
        if current_user is not None and not current_user.can_manage_property(property_obj.landlord_id):
            raise PropertyOwnershipError()

    @staticmethod
    def _ensure_active(lease: Lease) -> None:
        if not lease.is_active:
            raise BusinessRuleViolationError("Ended leases cannot be ended or renewed")

    async def get_lease(self, lease_id: uuid.UUID) -> Lease:
        lease = await self.uow.leases.get_with_details(lease_id)
        if not lease:
            raise NotFoundError("Lease", str(lease_id))
        return lease

    async def create_lease(
        self,
        lease_data: LeaseCreate,
        property_id: uuid.UUID,
        tenant_id: uuid.UUID,
        current_user: Optional[User] = None
    ) -> Lease:
        """
        Create a lease for a tenant on an available property.

        The lease, the property's availability flip and the security deposit
        payment are committed together or not at all.

        Args:
            lease_data: Lease dates, rent and terms
            property_id: Property to lease
            tenant_id: Tenant taking the lease
            current_user: Acting user; when given, must own the property or be an admin

        Returns:
            Created lease with property and tenant loaded

        Raises:
            BadRequestError: If the property is missing or unavailable, or the tenant
                is missing, not a tenant or not NID-verified
            PropertyOwnershipError: If the acting user does not manage the property
            LeaseOverlapError: If the dates overlap another lease on the property
        """
        property_obj = await self.uow.properties.get_by_id(property_id)
        if not property_obj or not property_obj.is_available:
            raise BadRequestError("Property is not available")
        self._ensure_can_manage(property_obj, current_user)

        tenant = await self.uow.users.get_by_id(tenant_id)
        if not tenant or not tenant.is_tenant:
            raise BadRequestError("Invalid tenant")
        if not tenant.is_nid_verified:
            raise BadRequestError("Tenant NID is not verified")

        if await self.uow.leases.has_overlapping_lease(property_id, lease_data.start_date, lease_data.end_date):
            raise LeaseOverlapError(str(property_id))

        await self.uow.begin_transaction()
        try:
            lease = Lease(
                property_id=property_id,
                tenant_id=tenant_id,
                start_date=lease_data.start_date,
                end_date=lease_data.end_date,
                monthly_rent=lease_data.monthly_rent or property_obj.rent_amount,
                terms_and_conditions=lease_data.terms_and_conditions,
                is_active=True,
            )
            self.uow.leases.add(lease)

            property_obj.is_available = False
            await self.uow.properties.update(property_obj)
            await self.uow.save_changes()

            if property_obj.security_deposit and property_obj.security_deposit > 0:
                await self.payment_service.create_security_deposit_payment(
                    lease.id, property_obj.security_deposit, lease.start_date
                )

            await self.uow.commit()

        except (APIException, SQLAlchemyError):
            await self.uow.rollback()
            raise
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to create lease on property {property_id}: {e}")
            raise BadRequestError(f"Failed to create lease: {str(e)}")

        logger.info(f"Lease {lease.id} created for tenant {tenant_id} on property {property_id}")
        return await self.get_lease(lease.id)

    async def end_lease(self, lease_id: uuid.UUID, current_user: Optional[User] = None) -> Lease:
        """
        End a lease today and make the property available again.

        Raises:
            NotFoundError: If the lease doesn't exist
            PropertyOwnershipError: If the acting user does not manage the property
            BusinessRuleViolationError: If the lease has already ended
        """
        lease = await self.get_lease(lease_id)
        self._ensure_can_manage(lease.property_rel, current_user)
        self._ensure_active(lease)

        lease.end_date = date.today()
        lease.is_active = False
        lease.property_rel.is_available = True

        await self.uow.leases.update(lease)
        await self.uow.save_changes()

        logger.info(f"Lease {lease_id} ended, property {lease.property_id} is available again")
        return await self.get_lease(lease_id)

    async def renew_lease(
        self,
        lease_id: uuid.UUID,
        new_end_date: date,
        current_user: Optional[User] = None
    ) -> Lease:
        """
        Extend a lease to a later end date.

        Raises:
            NotFoundError: If the lease doesn't exist
            BadRequestError: If the new end date does not extend the lease
            BusinessRuleViolationError: If the lease has already ended
            LeaseOverlapError: If the extension runs into another lease
        """
        lease = await self.get_lease(lease_id)
        self._ensure_can_manage(lease.property_rel, current_user)
        self._ensure_active(lease)

        current_end = lease.end_date or lease.start_date
        if new_end_date <= current_end:
            raise BadRequestError("New end date must be after the current end date")

        if await self.uow.leases.has_overlapping_lease(
            lease.property_id, lease.start_date, new_end_date, exclude_lease_id=lease.id
        ):
            raise LeaseOverlapError(str(lease.property_id))

        lease.end_date = new_end_date
        await self.uow.leases.update(lease)
        await self.uow.save_changes()

        logger.info(f"Lease {lease_id} renewed until {new_end_date}")
        return await self.get_lease(lease_id)

    async def generate_lease_document(self, lease_id: uuid.UUID) -> str:
        """
        Render the lease agreement, store it and record its path on the lease.

        Returns:
            Storage path of the agreement

        Raises:
            NotFoundError: If the lease doesn't exist
        """
        lease = await self.get_lease(lease_id)

        content = self.pdf_service.generate_lease_agreement(lease)
        path = await self.storage.save_bytes(content, self.storage.LEASE_FOLDER, f"lease_{lease.id}.pdf")

        lease.document_path = path
        await self.uow.leases.update(lease)
        await self.uow.save_changes()

        logger.info(f"Lease agreement generated for lease {lease_id}: {path}")
        return path

    async def get_leases_by_tenant(self, tenant_id: uuid.UUID) -> List[Lease]:
        return await self.uow.leases.list_by_tenant(tenant_id)

    async def get_active_lease_by_tenant(self, tenant_id: uuid.UUID, today: Optional[date] = None) -> Lease:
        lease = await self.uow.leases.get_active_for_tenant(tenant_id, today or date.today())
        if not lease:
            raise NotFoundError("Active lease for tenant", str(tenant_id))
        return lease

    async def get_leases_by_property(self, property_id: uuid.UUID) -> List[Lease]:
        return await self.uow.leases.list_by_property(property_id)
