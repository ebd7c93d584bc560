"""
Pydantic schemas for user registration, login and profile management.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from rental_api.models.user import UserRole
from rental_api.utils.validators import ValidationUtils


class UserBase(BaseModel):
    """Base user schema with common fields."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["tenant@example.com"]
    )

    full_name: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="User's full name",
        examples=["Rahim Uddin"]
    )

    phone_number: Optional[str] = Field(
        None,
        max_length=32,
        description="Contact phone number",
        examples=["+8801712345678"]
    )

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v):
        """Validate and clean full name."""
        if not v or not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v):
        if v is not None and not ValidationUtils.is_valid_phone(v):
            raise ValueError("Invalid phone number")
        return v.strip() if v else v


class UserRegister(UserBase):
    """Schema for public registration. Password strength is enforced by the user service."""

    password: str = Field(
        ...,
        max_length=128,
        description="Plain text password",
        examples=["Str0ng!Pass"]
    )

    nid: str = Field(
        ...,
        min_length=10,
        max_length=17,
        description="National identity number (10 or 17 digits)",
        examples=["1234567890"]
    )

    role: UserRole = Field(
        UserRole.TENANT,
        description="Account role",
        examples=["tenant"]
    )

    @field_validator("nid")
    @classmethod
    def validate_nid(cls, v):
        return v.strip()


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Schema for updating the caller's profile."""

    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=32)

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v):
        if v is not None and not ValidationUtils.is_valid_phone(v):
            raise ValueError("Invalid phone number")
        return v


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., max_length=128)


class UserResponse(BaseModel):
    """Schema for user responses (no password data)."""

    id: uuid.UUID
    email: EmailStr
    full_name: str
    phone_number: Optional[str] = None
    nid: str
    is_nid_verified: bool
    role: UserRole
    created_at: datetime
    updated_at: datetime


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserResponse


class NidVerificationResponse(BaseModel):
    user_id: uuid.UUID
    is_nid_verified: bool
    message: str
