"""
Pydantic schemas for rent payment requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
import uuid

from rental_api.models.payment import PaymentStatus, PaymentType


class PaymentCreate(BaseModel):
    lease_id: uuid.UUID
    amount: Decimal = Field(..., gt=0, examples=[15000])
    due_date: date
    payment_type: PaymentType = PaymentType.RENT
    payment_method: str = Field("Unspecified", max_length=50)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    payment_method: Optional[str] = Field(None, max_length=50, examples=["bKash"])


class PaymentResponse(BaseModel):
    """Payment as seen by clients; status is overdue for late pending payments."""

    id: uuid.UUID
    lease_id: uuid.UUID
    due_date: date
    payment_date: Optional[datetime] = None
    amount: float
    payment_method: str
    payment_type: PaymentType
    status: PaymentStatus
    slip_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LateFeeResponse(BaseModel):
    payment_id: uuid.UUID
    days_late: int
    late_fee: float


class PaymentVerificationResponse(BaseModel):
    payment_id: uuid.UUID
    verified: bool
