"""
UtilityBill model for recurring charges on a property (electricity, water, gas).
"""

from sqlalchemy import Boolean, Date, String, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_api.database import Base
from datetime import date
from decimal import Decimal
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rental_api.models.property import Property


class UtilityBill(Base):
    __tablename__ = "utility_bills"

    bill_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Kind of utility, e.g. Electricity"
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False
    )

    issue_date: Mapped[date] = mapped_column(Date, nullable=False)

    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    is_paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="utility_bills"
    )

    def __repr__(self) -> str:
        return f"<UtilityBill(id={self.id}, type={self.bill_type}, amount={self.amount})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "bill_type": self.bill_type,
            "amount": float(self.amount),
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "is_paid": self.is_paid,
            "property_id": str(self.property_id),
            "created_at": self.created_at.isoformat(),
        }
