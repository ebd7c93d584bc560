"""
Lease model binding a tenant to a property for a date interval.
An open-ended lease has no end date and runs until it is ended explicitly.
"""

from sqlalchemy import Date, String, Text, Numeric, Boolean, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_api.database import Base
from datetime import date
from decimal import Decimal
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_api.models.user import User
    from rental_api.models.property import Property
    from rental_api.models.payment import RentPayment


class Lease(Base):
    """
    Lease agreement between a landlord's property and a tenant.
    Leases on the same property never overlap, ended ones included.
    """

    __tablename__ = "leases"

    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="First day of the lease"
    )

    end_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Last day of the lease, null for open-ended leases"
    )

    monthly_rent: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="Agreed monthly rent"
    )

    terms_and_conditions: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Additional terms printed on the lease agreement"
    )

    document_path: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Storage path of the generated lease agreement"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Whether the lease is currently in force"
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the leased property"
    )

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="ID of the tenant holding the lease"
    )

    # Relationships
    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="leases",
        lazy="selectin"
    )

    tenant: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    payments: Mapped[List["RentPayment"]] = relationship(
        "RentPayment",
        back_populates="lease",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RentPayment.due_date.asc()"
    )

    def __repr__(self) -> str:
        return f"<Lease(id={self.id}, property_id={self.property_id}, tenant_id={self.tenant_id})>"

    def covers(self, day: date) -> bool:
        """
        Check whether the lease interval contains a given day.

        Args:
            day: Day to check

        Returns:
            True if start_date <= day and the lease has not ended before it
        """
        if day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date

    def to_dict(self, include_details: bool = False) -> dict:
        """
        Convert lease to dictionary.

        Args:
            include_details: Whether to include property and tenant information

        Returns:
            Dictionary representation of lease
        """
        result = {
            "id": str(self.id),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "monthly_rent": float(self.monthly_rent),
            "terms_and_conditions": self.terms_and_conditions,
            "document_path": self.document_path,
            "is_active": self.is_active,
            "property_id": str(self.property_id),
            "tenant_id": str(self.tenant_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_details:
            result["property"] = self.property_rel.to_dict(include_images=False) if self.property_rel else None
            result["tenant"] = self.tenant.to_dict() if self.tenant else None

        return result


# Overlap checks scan leases per property
property_active_index = Index(
    "idx_leases_property_active",
    Lease.property_id,
    Lease.is_active,
    Lease.start_date
)
