"""
Property management API endpoints: listings, search, images, availability and utility bills.
Reads are public; mutations require the owning landlord or an admin.
"""

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile, status
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from rental_api.models.user import User
from rental_api.services.property import PropertyService
from rental_api.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    AvailabilityResponse,
    UtilityBillCreate,
    UtilityBillResponse,
)
from rental_api.schemas.error import get_crud_error_responses, get_error_responses
from rental_api.utils.dependencies import (
    get_current_user,
    get_current_landlord_user,
    get_property_service,
)


router = APIRouter(prefix="/property", tags=["Properties"])


@router.get(
    "/",
    response_model=List[PropertyResponse],
    summary="List all properties"
)
async def list_properties(
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_all_properties()
    return [PropertyResponse.model_validate(prop.to_dict()) for prop in properties]


@router.get(
    "/search",
    response_model=PropertyListResponse,
    summary="Search available properties",
    description="Filter available properties by city, rent range and bedrooms, with paging and sorting",
    responses=get_error_responses(400, 422)
)
async def search_properties(
    city: Optional[str] = Query(None, description="Case-insensitive part of the city name"),
    min_rent: Optional[Decimal] = Query(None, ge=0, description="Minimum monthly rent"),
    max_rent: Optional[Decimal] = Query(None, ge=0, description="Maximum monthly rent"),
    bedrooms: Optional[int] = Query(None, ge=0, le=50, description="Exact number of bedrooms"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    page_size: Optional[int] = Query(None, ge=1, le=100, description="Number of properties per page"),
    sort_by: str = Query("rent", description="rent, bedrooms, bathrooms or date"),
    sort_direction: str = Query("asc", pattern="^(asc|desc)$", description="Sort direction"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Search available properties.

    Unknown sort fields fall back to rent.
    """
    result = await property_service.search_properties(
        city=city,
        min_rent=min_rent,
        max_rent=max_rent,
        bedrooms=bedrooms,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_direction=sort_direction
    )
    result["items"] = [PropertyResponse.model_validate(prop.to_dict()) for prop in result["items"]]
    return PropertyListResponse(**result)


@router.get(
    "/landlord/{landlord_id}",
    response_model=List[PropertyResponse],
    summary="List a landlord's properties"
)
async def list_landlord_properties(
    landlord_id: UUID = Path(..., description="Landlord ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_properties_by_landlord(landlord_id)
    return [PropertyResponse.model_validate(prop.to_dict()) for prop in properties]


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get property details",
    responses=get_error_responses(404, 422)
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.get_property(property_id)
    return PropertyResponse.model_validate(property_obj.to_dict(include_landlord=True))


@router.post(
    "/",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a new property listing. Requires the landlord role.",
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate,
    current_user: User = Depends(get_current_landlord_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a property owned by the caller.

    Raises:
        BadRequestError: If the caller is not a landlord (admins cannot own properties)
    """
    property_obj = await property_service.create_property(property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict(include_landlord=True))


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update property",
    description="Update property details. Only the owner or an admin can update.",
    responses=get_crud_error_responses()
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.update_property(property_id, property_data, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property",
    description="Delete a property with its leases, payments, images, requests and bills.",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property(property_id, current_user)


@router.post(
    "/{property_id}/images",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload property images",
    description="Upload one or more JPEG, PNG or WebP images. Either all files are stored or none.",
    responses=get_crud_error_responses()
)
async def upload_property_images(
    property_id: UUID = Path(..., description="Property ID"),
    files: List[UploadFile] = File(..., description="Image files to upload"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    property_obj = await property_service.add_property_images(property_id, files, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.delete(
    "/images/{image_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete property image",
    responses=get_crud_error_responses()
)
async def delete_property_image(
    image_id: UUID = Path(..., description="Image ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> None:
    await property_service.delete_property_image(image_id, current_user)


@router.put(
    "/{property_id}/toggle-availability",
    response_model=AvailabilityResponse,
    summary="Toggle property availability",
    responses=get_crud_error_responses()
)
async def toggle_availability(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> AvailabilityResponse:
    property_obj = await property_service.toggle_availability(property_id, current_user)
    return AvailabilityResponse(property_id=property_obj.id, is_available=property_obj.is_available)


@router.get(
    "/{property_id}/utility-bills",
    response_model=List[UtilityBillResponse],
    summary="List utility bills of a property",
    responses=get_crud_error_responses()
)
async def list_utility_bills(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[UtilityBillResponse]:
    bills = await property_service.get_utility_bills(property_id, current_user)
    return [UtilityBillResponse.model_validate(bill.to_dict()) for bill in bills]


@router.post(
    "/{property_id}/utility-bills",
    response_model=UtilityBillResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a utility bill",
    responses=get_crud_error_responses()
)
async def add_utility_bill(
    bill_data: UtilityBillCreate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> UtilityBillResponse:
    bill = await property_service.add_utility_bill(property_id, bill_data, current_user)
    return UtilityBillResponse.model_validate(bill.to_dict())


@router.put(
    "/utility-bills/{bill_id}/pay",
    response_model=UtilityBillResponse,
    summary="Mark a utility bill as paid",
    responses=get_crud_error_responses()
)
async def pay_utility_bill(
    bill_id: UUID = Path(..., description="Utility bill ID"),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> UtilityBillResponse:
    bill = await property_service.mark_utility_bill_paid(bill_id, current_user)
    return UtilityBillResponse.model_validate(bill.to_dict())
