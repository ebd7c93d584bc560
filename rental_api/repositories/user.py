"""
User repository for authentication and user management queries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from rental_api.repositories.base import BaseRepository
from rental_api.models.user import User, UserRole
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user lookups by email, NID and role.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            query = select(User).where(func.lower(User.email) == email.lower())
            result = await self.db.execute(query)
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {email}")
            else:
                logger.debug(f"User with email {email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def email_exists(self, email: str) -> bool:
        try:
            query = select(func.count(User.id)).where(func.lower(User.email) == email.lower())
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to check email existence {email}: {e}")
            raise

    async def nid_exists(self, nid: str) -> bool:
        try:
            query = select(func.count(User.id)).where(User.nid == nid)
            result = await self.db.execute(query)
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to check NID existence: {e}")
            raise

    async def list_users(
        self,
        role: Optional[UserRole] = None,
        is_nid_verified: Optional[bool] = None,
        sort_direction: str = "desc"
    ) -> List[User]:
        """
        List users with optional role and verification filters.

        Args:
            role: Only return users with this role
            is_nid_verified: Only return users with this verification flag
            sort_direction: 'asc' or 'desc' on creation time

        Returns:
            List of users
        """
        try:
            query = select(User)
            if role is not None:
                query = query.where(User.role == role)
            if is_nid_verified is not None:
                query = query.where(User.is_nid_verified == is_nid_verified)

            if sort_direction.lower() == "asc":
                query = query.order_by(User.created_at.asc())
            else:
                query = query.order_by(User.created_at.desc())

            result = await self.db.execute(query)
            users = list(result.scalars().all())
            logger.debug(f"Listed {len(users)} users (role={role}, verified={is_nid_verified})")
            return users
        except Exception as e:
            logger.error(f"Failed to list users: {e}")
            raise
