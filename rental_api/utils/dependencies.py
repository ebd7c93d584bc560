"""
FastAPI dependency injection utilities for authentication, the unit of work and services.
Every dependency resolved within one request shares the same session and unit of work.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from rental_api.database import get_db
from rental_api.models.user import User, UserRole
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.services.email_service import EmailService
from rental_api.services.lease import LeaseService
from rental_api.services.maintenance import MaintenanceService
from rental_api.services.notifications import NotificationService
from rental_api.services.payment import PaymentService
from rental_api.services.pdf import PdfService
from rental_api.services.property import PropertyService
from rental_api.services.scheduler import ReminderScheduler, reminder_scheduler
from rental_api.services.storage import FileStorageService
from rental_api.services.user import UserService
from rental_api.utils.auth import verify_token
from rental_api.utils.exceptions import (
    UnauthorizedError,
    InvalidTokenError,
    InsufficientPermissionsError,
)
import uuid


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_unit_of_work(db: AsyncSession = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


def get_storage() -> FileStorageService:
    return FileStorageService()


def get_email_service() -> EmailService:
    return EmailService()


def get_pdf_service() -> PdfService:
    return PdfService()


def get_reminder_scheduler() -> ReminderScheduler:
    return reminder_scheduler


def get_notification_service(
    email_service: EmailService = Depends(get_email_service)
) -> NotificationService:
    return NotificationService(email_service)


async def get_user_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> UserService:
    return UserService(uow)


async def get_property_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    storage: FileStorageService = Depends(get_storage)
) -> PropertyService:
    return PropertyService(uow, storage)


async def get_payment_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    storage: FileStorageService = Depends(get_storage),
    notifications: NotificationService = Depends(get_notification_service),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    pdf_service: PdfService = Depends(get_pdf_service)
) -> PaymentService:
    return PaymentService(
        uow,
        storage=storage,
        notifications=notifications,
        scheduler=scheduler,
        pdf_service=pdf_service
    )


async def get_lease_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    payment_service: PaymentService = Depends(get_payment_service),
    storage: FileStorageService = Depends(get_storage),
    pdf_service: PdfService = Depends(get_pdf_service)
) -> LeaseService:
    return LeaseService(uow, payment_service=payment_service, storage=storage, pdf_service=pdf_service)


async def get_maintenance_service(
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifications: NotificationService = Depends(get_notification_service)
) -> MaintenanceService:
    return MaintenanceService(uow, notifications)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        uow: Unit of work of the request

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token provided
        InvalidTokenError: If the token is invalid or its user no longer exists
        TokenExpiredError: If token is expired
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    payload = verify_token(credentials.credentials)

    try:
        user_id = uuid.UUID(payload.user_id)
    except ValueError:
        raise InvalidTokenError("Invalid token subject")

    user = await uow.users.get_by_id(user_id)
    if not user:
        raise InvalidTokenError("User no longer exists")

    return user


def require_role(*roles: UserRole):
    """
    Create a dependency that requires one of the given roles.

    Args:
        roles: Roles allowed to call the endpoint

    Returns:
        Dependency function
    """
    async def role_dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            allowed = " or ".join(role.value for role in roles)
            raise InsufficientPermissionsError(f"access {allowed} resources")
        return current_user

    return role_dependency


get_current_admin_user = require_role(UserRole.ADMIN)
get_current_landlord_user = require_role(UserRole.LANDLORD, UserRole.ADMIN)
get_current_tenant_user = require_role(UserRole.TENANT)


def ensure_can_view_user(current_user: User, user_id: uuid.UUID) -> None:
    """
    Tenants may only read their own records; landlords and admins may read anyone's.

    Raises:
        InsufficientPermissionsError: If a tenant asks for another user's records
    """
    if current_user.is_tenant and current_user.id != user_id:
        raise InsufficientPermissionsError("access another user's records")
