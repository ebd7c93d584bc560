"""
Pydantic schemas for property requests and responses.
Handles property CRUD operations, search results, images and utility bills.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
import uuid

from rental_api.schemas.user import UserResponse


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    address: str = Field(
        ...,
        min_length=3,
        max_length=255,
        description="Street address",
        examples=["House 12, Road 5, Dhanmondi"]
    )

    city: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="City",
        examples=["Dhaka"]
    )

    description: Optional[str] = Field(None, max_length=5000)

    rent_amount: Decimal = Field(
        ...,
        gt=0,
        description="Monthly rent",
        examples=[20000]
    )

    security_deposit: Decimal = Field(
        Decimal("0"),
        ge=0,
        description="Deposit collected when a lease starts",
        examples=[40000]
    )

    bedrooms: int = Field(..., ge=0, le=50, examples=[3])

    bathrooms: int = Field(..., ge=0, le=50, examples=[2])

    amenities: Optional[str] = Field(
        None,
        max_length=2000,
        description="Comma separated amenities",
        examples=["Lift, Generator, Parking"]
    )

    @field_validator("address", "city")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""


class PropertyUpdate(BaseModel):
    """Schema for updating a property. Only provided fields change."""

    address: Optional[str] = Field(None, min_length=3, max_length=255)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)
    rent_amount: Optional[Decimal] = Field(None, gt=0)
    security_deposit: Optional[Decimal] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    amenities: Optional[str] = Field(None, max_length=2000)
    is_available: Optional[bool] = None


class PropertyImageResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    image_path: str
    created_at: datetime


class PropertyResponse(BaseModel):
    """Schema for property responses."""

    id: uuid.UUID
    address: str
    city: str
    description: Optional[str] = None
    rent_amount: float
    security_deposit: float
    bedrooms: int
    bathrooms: int
    amenities: Optional[str] = None
    is_available: bool
    landlord_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    images: List[PropertyImageResponse] = []
    landlord: Optional[UserResponse] = None


class PropertyListResponse(BaseModel):
    """Paginated property search results."""

    items: List[PropertyResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class AvailabilityResponse(BaseModel):
    property_id: uuid.UUID
    is_available: bool


class UtilityBillCreate(BaseModel):
    bill_type: str = Field(..., min_length=2, max_length=50, examples=["Electricity"])
    amount: Decimal = Field(..., gt=0)
    issue_date: date
    due_date: date

    @model_validator(mode="after")
    def validate_dates(self):
        if self.due_date < self.issue_date:
            raise ValueError("Due date cannot be before issue date")
        return self


class UtilityBillResponse(BaseModel):
    id: uuid.UUID
    bill_type: str
    amount: float
    issue_date: date
    due_date: date
    is_paid: bool
    property_id: uuid.UUID
    created_at: datetime
