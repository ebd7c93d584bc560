"""
Utility modules for the Rental Management API.
"""

from .auth import (
    create_access_token,
    generate_token,
    verify_token,
    validate_token,
    hash_password,
    verify_password,
    TokenPayload
)

from .exceptions import (
    APIException,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InsufficientPermissionsError,
    LeaseOverlapError,
    RateLimitExceededError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "generate_token",
    "verify_token",
    "validate_token",
    "hash_password",
    "verify_password",
    "TokenPayload",

    # Exceptions
    "APIException",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InsufficientPermissionsError",
    "LeaseOverlapError",
    "RateLimitExceededError",
]
