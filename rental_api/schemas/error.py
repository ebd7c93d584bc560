"""
Error response schemas for API documentation.
Mirrors the body produced by ErrorHandlerService.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error")
    message: str = Field(..., description="Human-readable error message")
    type: Optional[str] = Field(None, description="Error type identifier")
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["NOT_FOUND"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
    details: Optional[List[ErrorDetail]] = None


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse


ERROR_DESCRIPTIONS = {
    400: "Bad Request - business rule violated or invalid input",
    401: "Unauthorized - authentication required",
    403: "Forbidden - insufficient role or not the owner",
    404: "Not Found - resource does not exist",
    409: "Conflict - duplicate or overlapping resource",
    422: "Validation Error - request body or parameters are malformed",
    429: "Too Many Requests - rate limit exceeded",
    500: "Internal Server Error",
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Build the OpenAPI `responses` mapping for the given status codes.

    Args:
        status_codes: HTTP status codes the endpoint can return

    Returns:
        Mapping usable as the `responses` argument of a route or router
    """
    return {
        code: {"description": ERROR_DESCRIPTIONS[code], "model": APIErrorResponse}
        for code in status_codes
    }


def get_common_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(400, 401, 403, 404, 422, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(400, 401, 403, 404, 409, 422, 500)
