"""
PropertyImage model for managing property image uploads.
"""

from sqlalchemy import String, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_api.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rental_api.models.property import Property


class PropertyImage(Base):
    """Stored image file attached to a property."""

    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    image_path: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        unique=True,
        comment="Storage path of the image file"
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="images"
    )

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, path={self.image_path})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "image_path": self.image_path,
            "created_at": self.created_at.isoformat(),
        }
