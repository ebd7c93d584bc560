"""
Domain exceptions for the Rental Management API.

Each exception knows its HTTP status and the machine-readable code placed in
the error body, so services raise them directly and the handlers in main.py
render them without further mapping.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base class for errors returned to API clients."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "API_ERROR"

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code or self.default_status, detail=detail, headers=headers)
        self.error_code = error_code or self.default_code


class BadRequestError(APIException):
    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "BAD_REQUEST"


class UnauthorizedError(APIException):
    """Missing or unusable credentials. Always asks for a bearer token."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(APIException):
    default_status = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(detail)


class NotFoundError(APIException):
    default_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"
        super().__init__(detail)


class ConflictError(APIException):
    default_status = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


# Authentication
class InvalidCredentialsError(UnauthorizedError):
    def __init__(self):
        super().__init__("Invalid email or password")


class TokenExpiredError(UnauthorizedError):
    def __init__(self):
        super().__init__("Token has expired")


class InvalidTokenError(UnauthorizedError):
    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


# Authorization
class InsufficientPermissionsError(ForbiddenError):
    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


class PropertyOwnershipError(ForbiddenError):
    """Acting user is neither the property's landlord nor an admin."""

    def __init__(self):
        super().__init__("Only the property's landlord or an admin can do this")


# Domain rules
class BusinessRuleViolationError(BadRequestError):
    """A state transition the domain does not allow, e.g. reopening a resolved request."""

    def __init__(self, rule: str):
        super().__init__(rule, error_code="BUSINESS_RULE_VIOLATION")


class DuplicateResourceError(ConflictError):
    def __init__(self, resource: str, field: str):
        super().__init__(f"{resource} with this {field} already exists")


class LeaseOverlapError(ConflictError):
    """Requested lease interval intersects another lease on the same property."""

    def __init__(self, property_id: str):
        super().__init__(
            f"Property {property_id} already has a lease for the requested period",
            error_code="LEASE_OVERLAP"
        )


class ResourceInUseError(ConflictError):
    """Deleting a record that other records still reference."""

    def __init__(self, resource: str, detail: str):
        super().__init__(f"{resource} cannot be deleted: {detail}", error_code="RESOURCE_IN_USE")


# Uploads
class FileUploadError(BadRequestError):
    def __init__(self, detail: str):
        super().__init__(f"File upload error: {detail}", error_code="FILE_UPLOAD_ERROR")


class UnsupportedFileTypeError(FileUploadError):
    def __init__(self, file_type: str, supported_types: List[str]):
        super().__init__(f"unsupported file type '{file_type}', expected one of {', '.join(supported_types)}")


class FileSizeExceededError(FileUploadError):
    def __init__(self, size: int, max_size: int):
        super().__init__(f"file is {size} bytes, the limit is {max_size} bytes")


class RateLimitExceededError(APIException):
    default_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, retry_after: int):
        super().__init__(
            f"Too many attempts, retry in {retry_after} seconds",
            headers={"Retry-After": str(retry_after)}
        )
