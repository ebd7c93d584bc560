"""
Lease API endpoints: create, end, renew, lookups and the lease agreement PDF.
"""

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import Response
from typing import List
from uuid import UUID

from rental_api.models.lease import Lease
from rental_api.models.user import User
from rental_api.services.lease import LeaseService
from rental_api.services.user import UserService
from rental_api.schemas.lease import (
    LeaseCreateRequest,
    LeaseRenew,
    LeaseResponse,
    LeaseDetailResponse,
)
from rental_api.schemas.error import get_crud_error_responses, get_error_responses
from rental_api.utils.dependencies import (
    ensure_can_view_user,
    get_current_user,
    get_current_landlord_user,
    get_lease_service,
    get_user_service,
)
from rental_api.utils.exceptions import (
    BadRequestError,
    InsufficientPermissionsError,
    NotFoundError,
)


router = APIRouter(prefix="/lease", tags=["Leases"])


def _ensure_can_view_lease(lease: Lease, current_user: User) -> None:
    if current_user.is_admin or lease.tenant_id == current_user.id:
        return
    if lease.property_rel is not None and lease.property_rel.landlord_id == current_user.id:
        return
    raise InsufficientPermissionsError("access this lease")


@router.post(
    "/",
    response_model=LeaseDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a lease",
    description="Lease an available property to an NID-verified tenant given by id or email.",
    responses=get_crud_error_responses()
)
async def create_lease(
    lease_data: LeaseCreateRequest,
    current_user: User = Depends(get_current_landlord_user),
    lease_service: LeaseService = Depends(get_lease_service),
    user_service: UserService = Depends(get_user_service)
) -> LeaseDetailResponse:
    """
    Create a lease.

    Raises:
        BadRequestError: If the property is unavailable or the tenant is invalid or unverified
        LeaseOverlapError: If the dates overlap another lease on the property
    """
    tenant_id = lease_data.tenant_id
    if tenant_id is None:
        try:
            tenant = await user_service.get_user_by_email(lease_data.tenant_email)
        except NotFoundError:
            raise BadRequestError("Invalid tenant")
        tenant_id = tenant.id

    lease = await lease_service.create_lease(lease_data, lease_data.property_id, tenant_id, current_user)
    return LeaseDetailResponse.model_validate(lease.to_dict(include_details=True))


@router.put(
    "/{lease_id}/end",
    response_model=LeaseResponse,
    summary="End a lease",
    description="End the lease today and make the property available again.",
    responses=get_crud_error_responses()
)
async def end_lease(
    lease_id: UUID = Path(..., description="Lease ID"),
    current_user: User = Depends(get_current_landlord_user),
    lease_service: LeaseService = Depends(get_lease_service)
) -> LeaseResponse:
    lease = await lease_service.end_lease(lease_id, current_user)
    return LeaseResponse.model_validate(lease.to_dict())


@router.put(
    "/{lease_id}/renew",
    response_model=LeaseResponse,
    summary="Renew a lease",
    description="Move the end date of a lease to a later day.",
    responses=get_crud_error_responses()
)
async def renew_lease(
    renew_data: LeaseRenew,
    lease_id: UUID = Path(..., description="Lease ID"),
    current_user: User = Depends(get_current_landlord_user),
    lease_service: LeaseService = Depends(get_lease_service)
) -> LeaseResponse:
    lease = await lease_service.renew_lease(lease_id, renew_data.new_end_date, current_user)
    return LeaseResponse.model_validate(lease.to_dict())


@router.get(
    "/tenant/{tenant_id}",
    response_model=List[LeaseResponse],
    summary="List a tenant's leases",
    responses=get_error_responses(401, 403, 422)
)
async def list_tenant_leases(
    tenant_id: UUID = Path(..., description="Tenant ID"),
    current_user: User = Depends(get_current_user),
    lease_service: LeaseService = Depends(get_lease_service)
) -> List[LeaseResponse]:
    ensure_can_view_user(current_user, tenant_id)
    leases = await lease_service.get_leases_by_tenant(tenant_id)
    return [LeaseResponse.model_validate(lease.to_dict()) for lease in leases]


@router.get(
    "/tenant/{tenant_id}/active",
    response_model=LeaseDetailResponse,
    summary="Get a tenant's active lease",
    responses=get_error_responses(401, 403, 404, 422)
)
async def get_active_tenant_lease(
    tenant_id: UUID = Path(..., description="Tenant ID"),
    current_user: User = Depends(get_current_user),
    lease_service: LeaseService = Depends(get_lease_service)
) -> LeaseDetailResponse:
    ensure_can_view_user(current_user, tenant_id)
    lease = await lease_service.get_active_lease_by_tenant(tenant_id)
    return LeaseDetailResponse.model_validate(lease.to_dict(include_details=True))


@router.get(
    "/property/{property_id}",
    response_model=List[LeaseResponse],
    summary="List leases of a property",
    responses=get_error_responses(401, 422)
)
async def list_property_leases(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_landlord_user),
    lease_service: LeaseService = Depends(get_lease_service)
) -> List[LeaseResponse]:
    leases = await lease_service.get_leases_by_property(property_id)
    return [LeaseResponse.model_validate(lease.to_dict()) for lease in leases]


@router.get(
    "/{lease_id}",
    response_model=LeaseDetailResponse,
    summary="Get lease details",
    responses=get_error_responses(401, 403, 404, 422)
)
async def get_lease(
    lease_id: UUID = Path(..., description="Lease ID"),
    current_user: User = Depends(get_current_user),
    lease_service: LeaseService = Depends(get_lease_service)
) -> LeaseDetailResponse:
    lease = await lease_service.get_lease(lease_id)
    _ensure_can_view_lease(lease, current_user)
    return LeaseDetailResponse.model_validate(lease.to_dict(include_details=True))


@router.get(
    "/{lease_id}/document",
    summary="Download the lease agreement",
    description="Returns the lease agreement PDF, generating it on first request.",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}},
        **get_error_responses(401, 403, 404, 422),
    }
)
async def get_lease_document(
    lease_id: UUID = Path(..., description="Lease ID"),
    current_user: User = Depends(get_current_user),
    lease_service: LeaseService = Depends(get_lease_service)
) -> Response:
    lease = await lease_service.get_lease(lease_id)
    _ensure_can_view_lease(lease, current_user)

    content = await lease_service.storage.get_file_bytes(lease.document_path)
    if content is None:
        path = await lease_service.generate_lease_document(lease_id)
        content = await lease_service.storage.get_file_bytes(path)

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="lease_{lease_id}.pdf"'}
    )
