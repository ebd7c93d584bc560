"""
Pydantic schemas for maintenance requests.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from rental_api.models.maintenance import MaintenanceStatus


class MaintenanceCreate(BaseModel):
    property_id: uuid.UUID
    description: str = Field(..., min_length=5, max_length=5000, examples=["Kitchen sink is leaking"])

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        if not v.strip():
            raise ValueError("Description cannot be empty")
        return v.strip()


class MaintenanceStatusUpdate(BaseModel):
    status: MaintenanceStatus


class MaintenanceResponse(BaseModel):
    id: uuid.UUID
    description: str
    request_date: datetime
    completion_date: Optional[datetime] = None
    status: MaintenanceStatus
    property_id: uuid.UUID
    tenant_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
