"""
MaintenanceRequest model for tenant-reported issues.
"""

from sqlalchemy import DateTime, Text, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_api.database import Base, utcnow
from datetime import datetime
import enum
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_api.models.user import User
    from rental_api.models.property import Property


class MaintenanceStatus(str, enum.Enum):
    """Maintenance request lifecycle."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class MaintenanceRequest(Base):
    """Issue filed by a tenant against a property."""

    __tablename__ = "maintenance_requests"

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Description of the problem"
    )

    request_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="When the request was filed"
    )

    completion_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the request was resolved"
    )

    status: Mapped[MaintenanceStatus] = mapped_column(
        SQLEnum(MaintenanceStatus),
        nullable=False,
        default=MaintenanceStatus.PENDING,
        index=True,
        comment="Current request status"
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="maintenance_requests",
        lazy="selectin"
    )

    tenant: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<MaintenanceRequest(id={self.id}, property_id={self.property_id}, status={self.status})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "description": self.description,
            "request_date": self.request_date.isoformat(),
            "completion_date": self.completion_date.isoformat() if self.completion_date else None,
            "status": self.status.value,
            "property_id": str(self.property_id),
            "tenant_id": str(self.tenant_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
