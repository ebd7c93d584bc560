"""
User model with authentication and role management.
Handles accounts for tenants, landlords and administrators.
"""

from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from rental_api.database import Base
from email_validator import validate_email, EmailNotValidError
import enum
import uuid
from typing import Optional


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    TENANT = "tenant"
    LANDLORD = "landlord"
    ADMIN = "admin"


class User(Base):
    """
    User model for authentication and authorization.
    A landlord owns properties; a tenant holds leases and files maintenance requests.
    """

    __tablename__ = "users"

    # User identification and authentication
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    # User profile information
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's full name"
    )

    phone_number: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        comment="Contact phone number"
    )

    # Identity verification
    nid: Mapped[str] = mapped_column(
        String(17),
        unique=True,
        nullable=False,
        index=True,
        comment="National identity number - must be unique"
    )

    is_nid_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether the national identity number has been verified"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole),
        nullable=False,
        default=UserRole.TENANT,
        index=True,
        comment="User role for access control"
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    @property
    def is_landlord(self) -> bool:
        """Check if user has landlord role."""
        return self.role == UserRole.LANDLORD

    @property
    def is_tenant(self) -> bool:
        """Check if user has tenant role."""
        return self.role == UserRole.TENANT

    def can_manage_property(self, landlord_id: uuid.UUID) -> bool:
        """
        Check if user can manage a specific property.

        Args:
            landlord_id: UUID of the property's landlord

        Returns:
            True if user is an admin or owns the property
        """
        if self.is_admin:
            return True
        return self.id == landlord_id

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding sensitive data).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "full_name": self.full_name,
            "phone_number": self.phone_number,
            "nid": self.nid,
            "is_nid_verified": self.is_nid_verified,
            "role": self.role.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
