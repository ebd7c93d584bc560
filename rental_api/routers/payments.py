"""
Rent payment API endpoints: records, status changes, slips, late fees, receipts and listings.
"""

from fastapi import APIRouter, Depends, File, Path, UploadFile, status
from fastapi.responses import Response
from datetime import date
from typing import List
from uuid import UUID

from rental_api.models.payment import PaymentStatus, RentPayment
from rental_api.models.user import User
from rental_api.services.lease import LeaseService
from rental_api.services.payment import PaymentService
from rental_api.schemas.payment import (
    PaymentCreate,
    PaymentStatusUpdate,
    PaymentResponse,
    LateFeeResponse,
    PaymentVerificationResponse,
)
from rental_api.schemas.error import get_crud_error_responses, get_error_responses
from rental_api.utils.dependencies import (
    ensure_can_view_user,
    get_current_user,
    get_current_landlord_user,
    get_lease_service,
    get_payment_service,
)
from rental_api.utils.exceptions import InsufficientPermissionsError


router = APIRouter(prefix="/payments", tags=["Payments"])


def _manages(payment: RentPayment, user: User) -> bool:
    if user.is_admin:
        return True
    lease = payment.lease
    return lease is not None and lease.property_rel is not None and lease.property_rel.landlord_id == user.id


def _is_party(payment: RentPayment, user: User) -> bool:
    """Admins, the lease's tenant and the property's landlord take part in a payment."""
    if _manages(payment, user):
        return True
    return payment.lease is not None and payment.lease.tenant_id == user.id


def _ensure_party(payment: RentPayment, user: User) -> None:
    if not _is_party(payment, user):
        raise InsufficientPermissionsError("access this payment")


def _to_responses(payments: List[RentPayment]) -> List[PaymentResponse]:
    today = date.today()
    return [PaymentResponse.model_validate(payment.to_dict(today)) for payment in payments]


@router.post(
    "/",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a payment record",
    description="Create a pending rent or security deposit payment for a lease.",
    responses=get_crud_error_responses()
)
async def create_payment(
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_landlord_user),
    payment_service: PaymentService = Depends(get_payment_service),
    lease_service: LeaseService = Depends(get_lease_service)
) -> PaymentResponse:
    lease = await lease_service.get_lease(payment_data.lease_id)
    if not current_user.can_manage_property(lease.property_rel.landlord_id):
        raise InsufficientPermissionsError("create payments for this lease")

    payment = await payment_service.create_payment_record(
        payment_data.lease_id,
        payment_data.amount,
        payment_data.due_date,
        payment_type=payment_data.payment_type,
        payment_method=payment_data.payment_method
    )
    return PaymentResponse.model_validate(payment.to_dict())


@router.get(
    "/overdue",
    response_model=List[PaymentResponse],
    summary="List overdue payments",
    description="Pending payments past their due date. Landlords only see their own properties.",
    responses=get_error_responses(401, 403)
)
async def list_overdue_payments(
    current_user: User = Depends(get_current_landlord_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    payments = await payment_service.get_overdue_payments()
    return _to_responses([payment for payment in payments if _is_party(payment, current_user)])


@router.get(
    "/due/{due_date}",
    response_model=List[PaymentResponse],
    summary="List pending payments due on a day",
    responses=get_error_responses(401, 403, 422)
)
async def list_payments_due_on(
    due_date: date = Path(..., description="Due date (YYYY-MM-DD)"),
    current_user: User = Depends(get_current_landlord_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    payments = await payment_service.get_payments_by_due_date(due_date)
    return _to_responses([payment for payment in payments if _is_party(payment, current_user)])


@router.get(
    "/lease/{lease_id}",
    response_model=List[PaymentResponse],
    summary="List payments of a lease",
    responses=get_error_responses(401, 403, 422)
)
async def list_lease_payments(
    lease_id: UUID = Path(..., description="Lease ID"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    payments = await payment_service.get_payments_by_lease(lease_id)
    for payment in payments:
        _ensure_party(payment, current_user)
    return _to_responses(payments)


@router.get(
    "/tenant/{tenant_id}/history",
    response_model=List[PaymentResponse],
    summary="Payment history of a tenant",
    responses=get_error_responses(401, 403, 422)
)
async def tenant_payment_history(
    tenant_id: UUID = Path(..., description="Tenant ID"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    ensure_can_view_user(current_user, tenant_id)
    return _to_responses(await payment_service.get_payment_history(tenant_id))


@router.get(
    "/tenant/{tenant_id}/pending",
    response_model=List[PaymentResponse],
    summary="Pending payments of a tenant",
    responses=get_error_responses(401, 403, 422)
)
async def tenant_pending_payments(
    tenant_id: UUID = Path(..., description="Tenant ID"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    ensure_can_view_user(current_user, tenant_id)
    return _to_responses(await payment_service.get_pending_payments_by_tenant(tenant_id))


@router.get(
    "/landlord/{landlord_id}",
    response_model=List[PaymentResponse],
    summary="Payments across a landlord's properties",
    responses=get_error_responses(401, 403, 422)
)
async def landlord_payments(
    landlord_id: UUID = Path(..., description="Landlord ID"),
    current_user: User = Depends(get_current_landlord_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> List[PaymentResponse]:
    if not current_user.is_admin and current_user.id != landlord_id:
        raise InsufficientPermissionsError("access another landlord's payments")
    return _to_responses(await payment_service.get_payments_by_landlord(landlord_id))


@router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    summary="Get payment details",
    responses=get_error_responses(401, 403, 404, 422)
)
async def get_payment(
    payment_id: UUID = Path(..., description="Payment ID"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentResponse:
    payment = await payment_service.get_payment(payment_id)
    _ensure_party(payment, current_user)
    return PaymentResponse.model_validate(payment.to_dict())


@router.put(
    "/{payment_id}/status",
    response_model=PaymentResponse,
    summary="Update payment status",
    description="Mark a payment as paid. Only the landlord or an admin confirms payment, "
                "and paid payments cannot change status again.",
    responses=get_crud_error_responses()
)
async def update_payment_status(
    status_data: PaymentStatusUpdate,
    payment_id: UUID = Path(..., description="Payment ID"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentResponse:
    existing = await payment_service.get_payment(payment_id)
    _ensure_party(existing, current_user)
    if status_data.status == PaymentStatus.PAID and not _manages(existing, current_user):
        raise InsufficientPermissionsError("confirm this payment")

    payment = await payment_service.update_payment_status(
        payment_id, status_data.status, status_data.payment_method
    )
    return PaymentResponse.model_validate(payment.to_dict())


@router.post(
    "/{payment_id}/slip",
    response_model=PaymentResponse,
    summary="Upload a payment slip",
    description="Attach a PDF or image proving the payment.",
    responses=get_crud_error_responses()
)
async def upload_payment_slip(
    payment_id: UUID = Path(..., description="Payment ID"),
    file: UploadFile = File(..., description="Payment slip"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentResponse:
    _ensure_party(await payment_service.get_payment(payment_id), current_user)
    payment = await payment_service.upload_payment_slip(payment_id, file)
    return PaymentResponse.model_validate(payment.to_dict())


@router.get(
    "/{payment_id}/late-fee",
    response_model=LateFeeResponse,
    summary="Calculate the late fee",
    responses=get_error_responses(401, 403, 404, 422)
)
async def get_late_fee(
    payment_id: UUID = Path(..., description="Payment ID"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> LateFeeResponse:
    payment = await payment_service.get_payment(payment_id)
    _ensure_party(payment, current_user)

    today = date.today()
    return LateFeeResponse(
        payment_id=payment.id,
        days_late=0 if payment.is_paid else payment.days_late(today),
        late_fee=await payment_service.calculate_late_fee(payment_id, today)
    )


@router.get(
    "/{payment_id}/receipt",
    summary="Download a rent receipt",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}},
        **get_error_responses(400, 401, 403, 404, 422),
    }
)
async def get_receipt(
    payment_id: UUID = Path(..., description="Payment ID"),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> Response:
    _ensure_party(await payment_service.get_payment(payment_id), current_user)
    content = await payment_service.generate_rent_receipt(payment_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="receipt_{payment_id}.pdf"'}
    )


@router.post(
    "/{payment_id}/verify",
    response_model=PaymentVerificationResponse,
    summary="Verify a payment",
    description="Confirm the payment is paid and backed by a slip.",
    responses=get_crud_error_responses()
)
async def verify_payment(
    payment_id: UUID = Path(..., description="Payment ID"),
    current_user: User = Depends(get_current_landlord_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> PaymentVerificationResponse:
    _ensure_party(await payment_service.get_payment(payment_id), current_user)
    verified = await payment_service.verify_payment(payment_id)
    return PaymentVerificationResponse(payment_id=payment_id, verified=verified)


@router.delete(
    "/{payment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an unpaid payment",
    responses=get_crud_error_responses()
)
async def delete_payment(
    payment_id: UUID = Path(..., description="Payment ID"),
    current_user: User = Depends(get_current_landlord_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> None:
    _ensure_party(await payment_service.get_payment(payment_id), current_user)
    await payment_service.delete_unpaid_payment(payment_id)
