"""
Error handling service for consistent error response formatting and logging.
Every error leaves the API as {"error": {code, message, timestamp, request_id, details?}}.
"""

from datetime import datetime, timezone
from typing import Dict, Any, Optional, List
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from rental_api.config import settings
from rental_api.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)

# Substrings of database driver messages and what they mean to a client
CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("foreign key", "Referenced record does not exist or is still in use"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:
    """
    Turns exceptions into JSON error responses.

    Client errors are logged at warning, server errors at error with the traceback.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the error body.

        Args:
            error_code: Machine-readable error code
            message: Human-readable error message
            details: Optional per-field or debug information
            request_id: Request identifier for tracing

        Returns:
            Error response dictionary
        """
        error = {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "request_id": request_id,
        }
        if details:
            error["details"] = details
        return {"error": error}

    @staticmethod
    def _respond(
        request: Optional[Request],
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
        exc_info: Optional[BaseException] = None
    ) -> JSONResponse:
        request_id = ErrorHandlerService._get_request_id(request)
        path = request.url.path if request else None

        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"{error_code} [{request_id}] {status_code} on {path}: {message}",
            extra={"error_code": error_code, "status_code": status_code, "request_id": request_id, "path": path},
            exc_info=exc_info
        )

        body = ErrorHandlerService.format_error_response(error_code, message, details, request_id)
        return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        return ErrorHandlerService._respond(
            request,
            exception.status_code,
            exception.error_code,
            str(exception.detail),
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """
        Request and model validation errors, one detail entry per failing field.

        Args:
            exception: FastAPI RequestValidationError or pydantic ValidationError
            request: Optional FastAPI request object
        """
        details = [
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exception.errors()
        ]
        return ErrorHandlerService._respond(
            request, 422, "VALIDATION_ERROR", "Request validation failed", details=details
        )

    @staticmethod
    def handle_database_error(exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        """Integrity violations map to 409, everything else to 500."""
        if isinstance(exception, IntegrityError):
            driver_message = str(exception.orig).lower()
            message = next(
                (f"Constraint violation: {text}" for marker, text in CONSTRAINT_MESSAGES if marker in driver_message),
                "Data integrity constraint violation"
            )
            return ErrorHandlerService._respond(
                request, 409, "INTEGRITY_ERROR", message, details=ErrorHandlerService._debug_details(exception)
            )

        return ErrorHandlerService._respond(
            request,
            500,
            "DATABASE_ERROR",
            "Database operation failed",
            details=ErrorHandlerService._debug_details(exception),
            exc_info=exception
        )

    @staticmethod
    def handle_http_exception(exception: StarletteHTTPException, request: Optional[Request] = None) -> JSONResponse:
        return ErrorHandlerService._respond(
            request,
            exception.status_code,
            f"HTTP_{exception.status_code}",
            str(exception.detail),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """Generic 500; the exception type and message are only exposed in development."""
        return ErrorHandlerService._respond(
            request,
            500,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred. Please try again later.",
            details=ErrorHandlerService._debug_details(exception),
            exc_info=exception
        )

    @staticmethod
    def _debug_details(exception: Exception) -> Optional[List[Dict[str, Any]]]:
        if not settings.is_development:
            return None
        return [{"exception_type": type(exception).__name__, "message": str(exception)}]

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Request id assigned by the middleware, or a fresh one."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]
