"""
Error handling service for consistent error response formatting and logging.

Every error leaves the API as JSON::

    {"message": ..., "code": ..., "timestamp": ..., "request_id": ...,
     "error": ... (not in production), "details": [...] (validation only)}
"""

from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from app.config import get_settings
from app.schemas.common import format_validation_errors
from app.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

# Substrings of driver messages mapped to client-safe explanations
CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("foreign key", "Referenced record does not exist"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:
    """
    Turns exceptions into the JSON error envelope and logs them.
    Tracebacks are logged server side only; the ``error`` detail is hidden in production.
    """

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        error: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "message": message,
            "code": error_code,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        if error and not get_settings().is_production:
            body["error"] = error
        if details:
            body["details"] = details
        if request_id:
            body["request_id"] = request_id
        return body

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        details = exception.field_errors if isinstance(exception, ValidationError) else None
        return ErrorHandlerService._respond(
            request,
            status_code=exception.status_code,
            error_code=exception.error_code or "API_ERROR",
            message=exception.detail,
            error=exception.error,
            details=details,
            headers=exception.headers,
            level=logging.ERROR if exception.status_code >= 500 else logging.WARNING,
        )

    @staticmethod
    def handle_validation_error(exception: Any, request: Optional[Request] = None) -> JSONResponse:
        """
        Request body/query validation failures and stray pydantic errors.
        Both are reported as 400 and named after the first offending field.
        """
        details = format_validation_errors(exception)
        if details:
            first = details[0]
            message = f"{first['field']}: {first['message']}" if first["field"] else first["message"]
        else:
            message = "Request validation failed"

        return ErrorHandlerService._respond(
            request,
            status_code=400,
            error_code="VALIDATION_ERROR",
            message=message,
            details=details,
        )

    @staticmethod
    def handle_database_error(exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        if isinstance(exception, IntegrityError):
            status_code, error_code = 400, "CONFLICT"
            message = ErrorHandlerService._describe_constraint(exception)
        else:
            status_code, error_code = 500, "DATABASE_ERROR"
            message = "Database operation failed"

        return ErrorHandlerService._respond(
            request,
            status_code=status_code,
            error_code=error_code,
            message=message,
            error=type(exception).__name__,
            level=logging.ERROR,
            cause=exception,
        )

    @staticmethod
    def handle_http_exception(exception: StarletteHTTPException, request: Optional[Request] = None) -> JSONResponse:
        """Framework raised HTTP errors, e.g. unknown routes or wrong methods."""
        return ErrorHandlerService._respond(
            request,
            status_code=exception.status_code,
            error_code=f"HTTP_{exception.status_code}",
            message=str(exception.detail),
            headers=getattr(exception, "headers", None),
        )

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        return ErrorHandlerService._respond(
            request,
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred. Please try again later.",
            error=str(exception),
            level=logging.ERROR,
            cause=exception,
        )

    @staticmethod
    def _respond(
        request: Optional[Request],
        status_code: int,
        error_code: str,
        message: str,
        error: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
        level: int = logging.WARNING,
        cause: Optional[BaseException] = None
    ) -> JSONResponse:
        request_id = uuid.uuid4().hex[:8]
        path = request.url.path if request else None

        logger.log(
            level,
            f"[{request_id}] {status_code} {error_code} on {path}: {message}",
            extra={"request_id": request_id, "error_code": error_code, "path": path},
            exc_info=(type(cause), cause, cause.__traceback__) if cause is not None else None,
        )

        body = ErrorHandlerService.format_error_response(
            error_code=error_code,
            message=message,
            error=error,
            details=details,
            request_id=request_id,
        )
        return JSONResponse(status_code=status_code, content=body, headers=headers)

    @staticmethod
    def _describe_constraint(exception: IntegrityError) -> str:
        driver_message = str(getattr(exception, "orig", exception)).lower()
        for needle, message in CONSTRAINT_MESSAGES:
            if needle in driver_message:
                return message
        return "Data integrity constraint violation"


def _error_doc(description: str, code: str, message: str) -> Dict[str, Any]:
    example = {"message": message, "code": code, "timestamp": "2024-01-01T00:00:00Z", "request_id": "abc12345"}
    return {"description": description, "content": {"application/json": {"example": example}}}


# OpenAPI documentation for the shared error envelope
ERROR_RESPONSES = {
    400: _error_doc("Bad Request", "VALIDATION_ERROR", "Invalid input"),
    401: _error_doc("Unauthorized", "UNAUTHORIZED", "No token provided"),
    403: _error_doc("Forbidden", "FORBIDDEN", "Access forbidden"),
    404: _error_doc("Not Found", "NOT_FOUND", "Resource not found"),
    500: _error_doc("Internal Server Error", "INTERNAL_ERROR", "An unexpected error occurred"),
}
