"""
RentPayment model tracking dues against a lease.
Only pending and paid are stored; overdue is derived from the due date.
"""

from sqlalchemy import Date, DateTime, String, Numeric, Enum as SQLEnum, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_api.database import Base
from datetime import date, datetime
from decimal import Decimal
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_api.models.lease import Lease


class PaymentStatus(str, enum.Enum):
    """Payment lifecycle states. OVERDUE is never persisted."""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentType(str, enum.Enum):
    """What a payment is collected for."""
    RENT = "rent"
    SECURITY_DEPOSIT = "security_deposit"


class RentPayment(Base):
    """
    A single amount due on a lease.
    Once paid the status and payment date are frozen.
    """

    __tablename__ = "rent_payments"

    due_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="Day the payment falls due"
    )

    payment_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the payment was marked paid"
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="Amount due"
    )

    payment_method: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="Unspecified",
        comment="How the tenant paid"
    )

    payment_type: Mapped[PaymentType] = mapped_column(
        SQLEnum(PaymentType),
        nullable=False,
        default=PaymentType.RENT,
        comment="Rent or security deposit"
    )

    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
        comment="Stored payment status (pending or paid)"
    )

    slip_path: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Storage path of the uploaded payment slip"
    )

    lease_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("leases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the lease this payment belongs to"
    )

    lease: Mapped["Lease"] = relationship(
        "Lease",
        back_populates="payments",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<RentPayment(id={self.id}, lease_id={self.lease_id}, due={self.due_date}, status={self.status})>"

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID

    def days_late(self, today: date) -> int:
        """Whole days between the due date and today, never negative."""
        return max(0, (today - self.due_date).days)

    def effective_status(self, today: date) -> PaymentStatus:
        """
        Status as seen by clients.

        Args:
            today: Reference day

        Returns:
            OVERDUE for pending payments past their due date, otherwise the stored status
        """
        if self.status == PaymentStatus.PENDING and self.due_date < today:
            return PaymentStatus.OVERDUE
        return self.status

    def to_dict(self, today: Optional[date] = None) -> dict:
        today = today or date.today()
        return {
            "id": str(self.id),
            "lease_id": str(self.lease_id),
            "due_date": self.due_date.isoformat(),
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "amount": float(self.amount),
            "payment_method": self.payment_method,
            "payment_type": self.payment_type.value,
            "status": self.effective_status(today).value,
            "slip_path": self.slip_path,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


pending_due_index = Index(
    "idx_rent_payments_status_due",
    RentPayment.status,
    RentPayment.due_date
)
