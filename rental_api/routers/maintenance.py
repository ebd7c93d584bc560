"""
Maintenance request API endpoints.
"""

from fastapi import APIRouter, Depends, Path, status
from typing import List
from uuid import UUID

from rental_api.models.maintenance import MaintenanceRequest
from rental_api.models.user import User
from rental_api.services.maintenance import MaintenanceService
from rental_api.schemas.maintenance import (
    MaintenanceCreate,
    MaintenanceStatusUpdate,
    MaintenanceResponse,
)
from rental_api.schemas.error import get_crud_error_responses, get_error_responses
from rental_api.utils.dependencies import (
    ensure_can_view_user,
    get_current_user,
    get_current_tenant_user,
    get_current_landlord_user,
    get_maintenance_service,
)
from rental_api.utils.exceptions import InsufficientPermissionsError


router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


def _ensure_can_view_request(request: MaintenanceRequest, current_user: User) -> None:
    if current_user.is_admin or request.tenant_id == current_user.id:
        return
    if request.property_rel is not None and request.property_rel.landlord_id == current_user.id:
        return
    raise InsufficientPermissionsError("access this maintenance request")


@router.post(
    "/",
    response_model=MaintenanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File a maintenance request",
    description="Tenants report a problem with a property; the landlord is notified by email.",
    responses=get_crud_error_responses()
)
async def create_request(
    request_data: MaintenanceCreate,
    current_user: User = Depends(get_current_tenant_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceResponse:
    request = await maintenance_service.create_request(request_data, current_user.id)
    return MaintenanceResponse.model_validate(request.to_dict())


@router.put(
    "/{request_id}/status",
    response_model=MaintenanceResponse,
    summary="Update request status",
    description="Move a request to in progress or resolved; the tenant is notified by email.",
    responses=get_crud_error_responses()
)
async def update_request_status(
    status_data: MaintenanceStatusUpdate,
    request_id: UUID = Path(..., description="Maintenance request ID"),
    current_user: User = Depends(get_current_landlord_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceResponse:
    request = await maintenance_service.update_request_status(request_id, status_data.status, current_user)
    return MaintenanceResponse.model_validate(request.to_dict())


@router.get(
    "/tenant/{tenant_id}",
    response_model=List[MaintenanceResponse],
    summary="List a tenant's requests",
    responses=get_error_responses(401, 403, 422)
)
async def list_tenant_requests(
    tenant_id: UUID = Path(..., description="Tenant ID"),
    current_user: User = Depends(get_current_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> List[MaintenanceResponse]:
    ensure_can_view_user(current_user, tenant_id)
    requests = await maintenance_service.get_requests_by_tenant(tenant_id)
    return [MaintenanceResponse.model_validate(request.to_dict()) for request in requests]


@router.get(
    "/property/{property_id}",
    response_model=List[MaintenanceResponse],
    summary="List requests for a property",
    responses=get_error_responses(401, 403, 422)
)
async def list_property_requests(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_landlord_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> List[MaintenanceResponse]:
    requests = await maintenance_service.get_requests_by_property(property_id)
    return [MaintenanceResponse.model_validate(request.to_dict()) for request in requests]


@router.get(
    "/{request_id}",
    response_model=MaintenanceResponse,
    summary="Get a maintenance request",
    responses=get_error_responses(401, 403, 404, 422)
)
async def get_request(
    request_id: UUID = Path(..., description="Maintenance request ID"),
    current_user: User = Depends(get_current_user),
    maintenance_service: MaintenanceService = Depends(get_maintenance_service)
) -> MaintenanceResponse:
    request = await maintenance_service.get_request(request_id)
    _ensure_can_view_request(request, current_user)
    return MaintenanceResponse.model_validate(request.to_dict())
