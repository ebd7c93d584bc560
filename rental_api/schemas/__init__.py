"""
Pydantic schemas for request/response validation.
"""

from .user import (
    UserRegister,
    UserLogin,
    UserUpdate,
    UserResponse,
    PasswordChangeRequest,
    LoginResponse,
    NidVerificationResponse,
)

from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyImageResponse,
    AvailabilityResponse,
    UtilityBillCreate,
    UtilityBillResponse,
)

from .lease import (
    LeaseCreate,
    LeaseCreateRequest,
    LeaseRenew,
    LeaseResponse,
    LeaseDetailResponse,
)

from .payment import (
    PaymentCreate,
    PaymentStatusUpdate,
    PaymentResponse,
    LateFeeResponse,
    PaymentVerificationResponse,
)

from .maintenance import (
    MaintenanceCreate,
    MaintenanceStatusUpdate,
    MaintenanceResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "PasswordChangeRequest",
    "LoginResponse",
    "NidVerificationResponse",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyImageResponse",
    "AvailabilityResponse",
    "UtilityBillCreate",
    "UtilityBillResponse",
    "LeaseCreate",
    "LeaseCreateRequest",
    "LeaseRenew",
    "LeaseResponse",
    "LeaseDetailResponse",
    "PaymentCreate",
    "PaymentStatusUpdate",
    "PaymentResponse",
    "LateFeeResponse",
    "PaymentVerificationResponse",
    "MaintenanceCreate",
    "MaintenanceStatusUpdate",
    "MaintenanceResponse",
]
