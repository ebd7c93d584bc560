"""
User service for registration, authentication and profile management.
Enforces the password policy, unique email/NID and identity verification.
"""

from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.models.user import User, UserRole
from rental_api.schemas.user import UserRegister, UserUpdate
from rental_api.utils.auth import hash_password, verify_password
from rental_api.utils.validators import ValidationUtils
from rental_api.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    DuplicateResourceError,
    InvalidCredentialsError,
    ResourceInUseError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class UserService:
    """
    User service handling accounts for tenants, landlords and administrators.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def register_user(self, user_data: UserRegister, allow_admin: bool = False) -> User:
        """
        Register a new user.

        Args:
            user_data: Registration data
            allow_admin: Whether the admin role may be assigned (never over the public endpoint)

        Returns:
            Created user

        Raises:
            BadRequestError: If the password fails the policy or admin registration is attempted
            DuplicateResourceError: If the email or NID is already registered
        """
        try:
            if user_data.role == UserRole.ADMIN and not allow_admin:
                raise BadRequestError("Registration with the admin role is not allowed")

            ValidationUtils.validate_password_strength(user_data.password)

            email = User.validate_email_format(user_data.email)
            if await self.uow.users.email_exists(email):
                raise DuplicateResourceError("User", "email")

            if await self.uow.users.nid_exists(user_data.nid):
                raise DuplicateResourceError("User", "NID")

            user = User(
                email=email,
                hashed_password=hash_password(user_data.password),
                full_name=user_data.full_name,
                phone_number=user_data.phone_number,
                nid=user_data.nid,
                is_nid_verified=False,
                role=user_data.role,
            )
            self.uow.users.add(user)
            await self.uow.save_changes()

            logger.info(f"User registered: {user.email} (ID: {user.id}, role: {user.role.value})")
            return user

        except (APIException, SQLAlchemyError):
            raise
        except Exception as e:
            logger.error(f"Failed to register user {user_data.email}: {e}")
            raise BadRequestError(f"Failed to register user: {str(e)}")

    async def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password does not match
        """
        user = await self.uow.users.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.uow.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user

    async def get_user_by_email(self, email: str) -> User:
        user = await self.uow.users.get_by_email(email)
        if not user:
            raise NotFoundError("User", email)
        return user

    async def list_users(
        self,
        role: Optional[UserRole] = None,
        is_nid_verified: Optional[bool] = None,
        sort_direction: str = "desc"
    ) -> List[User]:
        return await self.uow.users.list_users(role, is_nid_verified, sort_direction)

    async def update_profile(self, user_id: uuid.UUID, profile_data: UserUpdate) -> User:
        """
        Update name and phone number of a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        try:
            user = await self.get_user(user_id)

            update_data = profile_data.model_dump(exclude_unset=True, exclude_none=True)
            for field, value in update_data.items():
                setattr(user, field, value)

            await self.uow.users.update(user)
            await self.uow.save_changes()

            logger.info(f"Profile updated for user {user_id}: {list(update_data)}")
            return user

        except (APIException, SQLAlchemyError):
            raise
        except Exception as e:
            logger.error(f"Failed to update profile {user_id}: {e}")
            raise BadRequestError(f"Failed to update profile: {str(e)}")

    async def update_password(self, user_id: uuid.UUID, current_password: str, new_password: str) -> None:
        """
        Change a user's password.

        Raises:
            NotFoundError: If the user does not exist
            BadRequestError: If the current password is wrong or the new one fails the policy
        """
        user = await self.get_user(user_id)

        if not verify_password(current_password, user.hashed_password):
            raise BadRequestError("Current password is incorrect")

        ValidationUtils.validate_password_strength(new_password)

        user.hashed_password = hash_password(new_password)
        await self.uow.users.update(user)
        await self.uow.save_changes()
        logger.info(f"Password changed for user {user_id}")

    async def verify_nid(self, user_id: uuid.UUID) -> bool:
        """
        Check the user's NID format and record the verdict.

        Args:
            user_id: User to verify

        Returns:
            True if the NID is valid (10 or 17 digits)

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.get_user(user_id)

        verified = ValidationUtils.is_valid_nid(user.nid)
        user.is_nid_verified = verified
        await self.uow.users.update(user)
        await self.uow.save_changes()

        logger.info(f"NID verification for user {user_id}: {verified}")
        return verified

    async def delete_user(self, user_id: uuid.UUID) -> None:
        """
        Delete a user that nothing references anymore.

        Raises:
            NotFoundError: If the user does not exist
            ResourceInUseError: If the user still owns properties, holds leases or has maintenance requests
        """
        user = await self.get_user(user_id)

        if await self.uow.properties.has_properties(user.id):
            raise ResourceInUseError("User", "the user still owns properties")
        if await self.uow.leases.tenant_has_leases(user.id):
            raise ResourceInUseError("User", "the user still has leases")
        if await self.uow.maintenance_requests.tenant_has_requests(user.id):
            raise ResourceInUseError("User", "the user still has maintenance requests")

        await self.uow.users.remove(user)
        await self.uow.save_changes()
        logger.info(f"User deleted: {user_id}")
