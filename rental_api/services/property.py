"""
Property service for managing listings with ownership validation.
Handles CRUD operations, image management, availability, search and utility bills.
"""

from typing import Optional, List, Dict, Any
from decimal import Decimal
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from rental_api.config import settings
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.repositories.property import PropertySearchFilters
from rental_api.models.property import Property
from rental_api.models.image import PropertyImage
from rental_api.models.user import User
from rental_api.models.utility_bill import UtilityBill
from rental_api.schemas.property import PropertyCreate, PropertyUpdate, UtilityBillCreate
from rental_api.services.storage import FileStorageService
from rental_api.utils.exceptions import (
    APIException,
    NotFoundError,
    BadRequestError,
    PropertyOwnershipError,
)
import math
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for managing rental listings.
    Mutations are restricted to the owning landlord or an admin.
    """

    def __init__(self, uow: UnitOfWork, storage: Optional[FileStorageService] = None):
        self.uow = uow
        self.storage = storage or FileStorageService()

    def _ensure_can_manage(self, property_obj: Property, current_user: User) -> None:
        if not current_user.can_manage_property(property_obj.landlord_id):
            raise PropertyOwnershipError()

    async def create_property(self, property_data: PropertyCreate, landlord: User) -> Property:
        """
        Create a new property owned by the given landlord.

        Args:
            property_data: Property creation data
            landlord: Owner of the new property

        Returns:
            Created property instance

        Raises:
            BadRequestError: If the owner is not a landlord
        """
        try:
            if not landlord.is_landlord:
                raise BadRequestError("Only landlords can create properties")

            property_obj = Property(
                **property_data.model_dump(),
                landlord_id=landlord.id,
                is_available=True,
                images=[],
            )
            self.uow.properties.add(property_obj)
            await self.uow.save_changes()

            logger.info(f"Property created by {landlord.email}: {property_obj.address}, {property_obj.city} (ID: {property_obj.id})")
            return await self.get_property(property_obj.id)

        except (APIException, SQLAlchemyError):
            raise
        except Exception as e:
            logger.error(f"Failed to create property for user {landlord.id}: {e}")
            raise BadRequestError(f"Failed to create property: {str(e)}")

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Get property with landlord, images and leases.

        Raises:
            NotFoundError: If property doesn't exist
        """
        property_obj = await self.uow.properties.get_with_details(property_id)
        if not property_obj:
            raise NotFoundError("Property", str(property_id))
        return property_obj

    async def get_all_properties(self) -> List[Property]:
        return await self.uow.properties.get_all()

    async def get_properties_by_landlord(self, landlord_id: uuid.UUID) -> List[Property]:
        return await self.uow.properties.list_by_landlord(landlord_id)

    async def is_owner(self, property_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.uow.properties.is_owned_by(property_id, user_id)

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate,
        current_user: User
    ) -> Property:
        """
        Update property fields.

        Raises:
            NotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller is neither the owner nor an admin
        """
        try:
            property_obj = await self.get_property(property_id)
            self._ensure_can_manage(property_obj, current_user)

            update_data = property_data.model_dump(exclude_unset=True, exclude_none=True)
            for field, value in update_data.items():
                setattr(property_obj, field, value)

            await self.uow.properties.update(property_obj)
            await self.uow.save_changes()

            logger.info(f"Property {property_id} updated by {current_user.email}: {list(update_data)}")
            return await self.get_property(property_id)

        except (APIException, SQLAlchemyError):
            raise
        except Exception as e:
            logger.error(f"Failed to update property {property_id}: {e}")
            raise BadRequestError(f"Failed to update property: {str(e)}")

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a property together with its leases, payments, images, requests and bills.

        Stored image files are removed after the database commit succeeds.

        Raises:
            NotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller is neither the owner nor an admin
        """
        property_obj = await self.get_property(property_id)
        self._ensure_can_manage(property_obj, current_user)

        image_paths = [image.image_path for image in property_obj.images]

        await self.uow.properties.remove(property_obj)
        await self.uow.save_changes()
        logger.info(f"Property {property_id} deleted by {current_user.email}")

        for path in image_paths:
            try:
                await self.storage.delete_file(path)
            except Exception as e:
                logger.warning(f"Failed to delete image file {path}: {e}")

    async def add_property_images(
        self,
        property_id: uuid.UUID,
        files: List[UploadFile],
        current_user: User
    ) -> Property:
        """
        Store uploaded images and attach them to the property.

        Either every file is stored and recorded or none is.

        Raises:
            NotFoundError: If property doesn't exist
            PropertyOwnershipError: If the caller is neither the owner nor an admin
            BadRequestError: If no files were sent or a file is rejected
        """
        property_obj = await self.get_property(property_id)
        self._ensure_can_manage(property_obj, current_user)

        if not files:
            raise BadRequestError("At least one image file is required")

        saved_paths: List[str] = []
        try:
            for upload in files:
                saved_paths.append(await self.storage.save_image(upload))

            self.uow.images.add_all([
                PropertyImage(property_id=property_id, image_path=path) for path in saved_paths
            ])
            await self.uow.save_changes()
        except Exception:
            for path in saved_paths:
                await self.storage.delete_file(path)
            raise

        logger.info(f"Added {len(saved_paths)} images to property {property_id}")
        return await self.get_property(property_id)

    async def delete_property_image(self, image_id: uuid.UUID, current_user: User) -> None:
        """
        Remove an image record and its file.

        Raises:
            NotFoundError: If the image doesn't exist
            PropertyOwnershipError: If the caller is neither the owner nor an admin
        """
        image = await self.uow.images.get_with_property(image_id)
        if not image:
            raise NotFoundError("Image", str(image_id))
        self._ensure_can_manage(image.property_rel, current_user)

        path = image.image_path
        await self.uow.images.remove(image)
        await self.uow.save_changes()

        try:
            await self.storage.delete_file(path)
        except Exception as e:
            logger.warning(f"Failed to delete image file {path}: {e}")

        logger.info(f"Image {image_id} removed from property {image.property_id}")

    async def toggle_availability(self, property_id: uuid.UUID, current_user: User) -> Property:
        property_obj = await self.get_property(property_id)
        self._ensure_can_manage(property_obj, current_user)

        property_obj.is_available = not property_obj.is_available
        await self.uow.properties.update(property_obj)
        await self.uow.save_changes()

        logger.info(f"Property {property_id} availability set to {property_obj.is_available}")
        return property_obj

    async def search_properties(
        self,
        city: Optional[str] = None,
        min_rent: Optional[Decimal] = None,
        max_rent: Optional[Decimal] = None,
        bedrooms: Optional[int] = None,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_by: str = "rent",
        sort_direction: str = "asc"
    ) -> Dict[str, Any]:
        """
        Search available properties.

        Args:
            city: Case-insensitive substring of the city
            min_rent: Minimum monthly rent
            max_rent: Maximum monthly rent
            bedrooms: Exact number of bedrooms
            page: 1-based page number
            page_size: Results per page (capped by configuration)
            sort_by: rent, bedrooms, bathrooms or date
            sort_direction: asc or desc

        Returns:
            Dictionary with items and pagination metadata

        Raises:
            BadRequestError: If the rent range or paging values are invalid
        """
        if min_rent is not None and max_rent is not None and min_rent > max_rent:
            raise BadRequestError("Minimum rent cannot be greater than maximum rent")
        if page < 1:
            raise BadRequestError("Page must be 1 or greater")

        page_size = min(page_size or settings.default_page_size, settings.max_page_size)
        if page_size < 1:
            raise BadRequestError("Page size must be 1 or greater")

        filters = PropertySearchFilters(
            city=city,
            min_rent=min_rent,
            max_rent=max_rent,
            bedrooms=bedrooms,
            available_only=True,
        )
        items, total = await self.uow.properties.search(
            filters, page=page, page_size=page_size, sort_by=sort_by, sort_direction=sort_direction
        )

        total_pages = math.ceil(total / page_size) if total else 0
        return {
            "items": items,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_previous": page > 1,
        }

    async def add_utility_bill(
        self,
        property_id: uuid.UUID,
        bill_data: UtilityBillCreate,
        current_user: User
    ) -> UtilityBill:
        property_obj = await self.get_property(property_id)
        self._ensure_can_manage(property_obj, current_user)

        bill = UtilityBill(**bill_data.model_dump(), property_id=property_id, is_paid=False)
        self.uow.utility_bills.add(bill)
        await self.uow.save_changes()

        logger.info(f"Utility bill {bill.bill_type} added to property {property_id}")
        return bill

    async def get_utility_bills(self, property_id: uuid.UUID, current_user: User) -> List[UtilityBill]:
        property_obj = await self.get_property(property_id)
        self._ensure_can_manage(property_obj, current_user)
        return await self.uow.utility_bills.list_by_property(property_id)

    async def mark_utility_bill_paid(self, bill_id: uuid.UUID, current_user: User) -> UtilityBill:
        bill = await self.uow.utility_bills.get_by_id(bill_id)
        if not bill:
            raise NotFoundError("Utility bill", str(bill_id))

        property_obj = await self.get_property(bill.property_id)
        self._ensure_can_manage(property_obj, current_user)

        bill.is_paid = True
        await self.uow.utility_bills.update(bill)
        await self.uow.save_changes()
        return bill
