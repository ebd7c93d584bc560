"""
Maintenance request service.
"""

from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from rental_api.database import utcnow
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.models.maintenance import MaintenanceRequest, MaintenanceStatus
from rental_api.models.user import User
from rental_api.schemas.maintenance import MaintenanceCreate
from rental_api.services.notifications import NotificationService
from rental_api.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    BusinessRuleViolationError,
    PropertyOwnershipError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class MaintenanceService:
    """
    Requests move pending -> in_progress -> resolved; resolved requests are closed.
    """

    def __init__(self, uow: UnitOfWork, notifications: Optional[NotificationService] = None):
        self.uow = uow
        self.notifications = notifications or NotificationService()

    async def get_request(self, request_id: uuid.UUID) -> MaintenanceRequest:
        request = await self.uow.maintenance_requests.get_with_details(request_id)
        if not request:
            raise NotFoundError("Maintenance request", str(request_id))
        return request

    async def create_request(self, request_data: MaintenanceCreate, tenant_id: uuid.UUID) -> MaintenanceRequest:
        """
        File a maintenance request and notify the landlord.

        Args:
            request_data: Property and problem description
            tenant_id: Tenant filing the request

        Returns:
            Created request with property and tenant loaded

        Raises:
            BadRequestError: If the tenant is missing or not a tenant
            NotFoundError: If the property doesn't exist
        """
        try:
            tenant = await self.uow.users.get_by_id(tenant_id)
            if not tenant or not tenant.is_tenant:
                raise BadRequestError("Only tenants can file maintenance requests")

            if not await self.uow.properties.exists(request_data.property_id):
                raise NotFoundError("Property", str(request_data.property_id))

            request = MaintenanceRequest(
                property_id=request_data.property_id,
                tenant_id=tenant_id,
                description=request_data.description,
                status=MaintenanceStatus.PENDING,
                request_date=utcnow(),
            )
            self.uow.maintenance_requests.add(request)
            await self.uow.save_changes()

        except (APIException, SQLAlchemyError):
            raise
        except Exception as e:
            logger.error(f"Failed to create maintenance request for tenant {tenant_id}: {e}")
            raise BadRequestError(f"Failed to create maintenance request: {str(e)}")

        logger.info(f"Maintenance request {request.id} filed for property {request.property_id}")

        request = await self.get_request(request.id)
        await self.notifications.notify_new_maintenance_request(request)
        return request

    async def update_request_status(
        self,
        request_id: uuid.UUID,
        status: MaintenanceStatus,
        current_user: Optional[User] = None
    ) -> MaintenanceRequest:
        """
        Change the status of a request and notify the tenant.

        Resolving a request stamps its completion date.

        Raises:
            NotFoundError: If the request doesn't exist
            PropertyOwnershipError: If the acting user does not manage the property
            BadRequestError: If the request is already resolved
        """
        request = await self.get_request(request_id)

        if current_user is not None and not current_user.can_manage_property(request.property_rel.landlord_id):
            raise PropertyOwnershipError()

        if request.status == status:
            return request
        if request.status == MaintenanceStatus.RESOLVED:
            raise BusinessRuleViolationError("Resolved maintenance requests cannot be reopened")

        request.status = status
        if status == MaintenanceStatus.RESOLVED:
            request.completion_date = utcnow()

        await self.uow.maintenance_requests.update(request)
        await self.uow.save_changes()
        logger.info(f"Maintenance request {request_id} moved to {status.value}")

        await self.notifications.notify_maintenance_status(request)
        return request

    async def get_requests_by_tenant(self, tenant_id: uuid.UUID) -> List[MaintenanceRequest]:
        return await self.uow.maintenance_requests.list_by_tenant(tenant_id)

    async def get_requests_by_property(self, property_id: uuid.UUID) -> List[MaintenanceRequest]:
        return await self.uow.maintenance_requests.list_by_property(property_id)
