"""
Property model for rental listings.
Handles property data with location, pricing, and relationship management.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_api.database import Base
from decimal import Decimal
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_api.models.user import User
    from rental_api.models.image import PropertyImage
    from rental_api.models.lease import Lease
    from rental_api.models.maintenance import MaintenanceRequest
    from rental_api.models.utility_bill import UtilityBill


class Property(Base):
    """
    Property model for managing rental listings.
    A property belongs to one landlord and is leased to tenants over time.
    """

    __tablename__ = "properties"

    # Location information
    address: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Street address of the property"
    )

    city: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="City the property is located in"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-form property description"
    )

    # Pricing information
    rent_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Monthly rent in local currency"
    )

    security_deposit: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        default=Decimal("0"),
        comment="Security deposit collected when a lease starts"
    )

    # Layout
    bedrooms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Number of bedrooms"
    )

    bathrooms: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Number of bathrooms"
    )

    amenities: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Comma separated list of amenities"
    )

    # Status and ownership
    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Whether the property can currently be leased"
    )

    landlord_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="ID of the landlord who owns this property"
    )

    # Relationships
    landlord: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="PropertyImage.created_at.asc()"
    )

    leases: Mapped[List["Lease"]] = relationship(
        "Lease",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    maintenance_requests: Mapped[List["MaintenanceRequest"]] = relationship(
        "MaintenanceRequest",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    utility_bills: Mapped[List["UtilityBill"]] = relationship(
        "UtilityBill",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, city={self.city}, rent={self.rent_amount})>"

    @property
    def image_count(self) -> int:
        """Get the number of images associated with this property."""
        return len(self.images)

    def to_dict(self, include_landlord: bool = False, include_images: bool = True) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_landlord: Whether to include landlord information
            include_images: Whether to include image information

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": str(self.id),
            "address": self.address,
            "city": self.city,
            "description": self.description,
            "rent_amount": float(self.rent_amount),
            "security_deposit": float(self.security_deposit or 0),
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "amenities": self.amenities,
            "is_available": self.is_available,
            "landlord_id": str(self.landlord_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_landlord and self.landlord:
            result["landlord"] = self.landlord.to_dict()

        if include_images:
            result["images"] = [image.to_dict() for image in self.images]

        return result


# Composite index for the public search (available listings by city and rent)
search_index = Index(
    "idx_properties_search",
    Property.is_available,
    Property.city,
    Property.rent_amount
)
