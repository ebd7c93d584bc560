"""
Pydantic schemas for lease requests and responses.
"""

from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
import uuid

from rental_api.schemas.user import UserResponse
from rental_api.schemas.property import PropertyResponse


class LeaseCreate(BaseModel):
    """Lease terms. Monthly rent defaults to the property's rent."""

    start_date: date = Field(..., examples=["2025-01-01"])
    end_date: Optional[date] = Field(
        None,
        description="Last day of the lease; omit for an open-ended lease",
        examples=["2025-12-31"]
    )
    monthly_rent: Optional[Decimal] = Field(None, gt=0)
    terms_and_conditions: Optional[str] = Field(None, max_length=10000)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class LeaseCreateRequest(LeaseCreate):
    """Request body for creating a lease; the tenant is given by id or email."""

    property_id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    tenant_email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def validate_tenant_reference(self):
        if self.tenant_id is None and self.tenant_email is None:
            raise ValueError("Either tenant_id or tenant_email is required")
        return self


class LeaseRenew(BaseModel):
    new_end_date: date


class LeaseResponse(BaseModel):
    id: uuid.UUID
    start_date: date
    end_date: Optional[date] = None
    monthly_rent: float
    terms_and_conditions: Optional[str] = None
    document_path: Optional[str] = None
    is_active: bool
    property_id: uuid.UUID
    tenant_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class LeaseDetailResponse(LeaseResponse):
    property: Optional[PropertyResponse] = None
    tenant: Optional[UserResponse] = None
