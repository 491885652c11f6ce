"""
Exception hierarchy for the Nestify API.

Each class fixes an HTTP status and a machine readable ``error_code``; services
raise them and the handlers in ``app.main`` render the JSON error envelope.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base class. Subclasses set ``status_code``, ``error_code`` and optionally
    ``default_detail`` as class attributes.

    ``error`` is an optional debugging string, shown to clients outside production.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "API_ERROR"
    default_detail: str = "Request failed"
    default_headers: Optional[Dict[str, Any]] = None

    def __init__(
        self,
        detail: Optional[str] = None,
        error: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=headers or self.default_headers
        )
        self.error = error

    @property
    def message(self) -> str:
        return self.detail


# 400
class ValidationError(APIException):
    """Missing or malformed input. ``field_errors`` lists each offending field."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_detail = "Invalid input"

    def __init__(self, detail: Optional[str] = None, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class InvalidQueryError(ValidationError):
    """Malformed search, filter, sort or range parameter."""

    error_code = "INVALID_QUERY"


class InvalidIdFormatError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_ID_FORMAT"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        super().__init__(
            f"Invalid {resource.lower()} ID format",
            error=f"'{resource_id}' is not a valid identifier" if resource_id else None
        )


class ConflictError(APIException):
    """Reported as 400 rather than 409 to stay compatible with existing clients."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "CONFLICT"


class DuplicateEmailError(ConflictError):
    default_detail = "User already exists"


class InvalidOperationError(APIException):
    """Well-formed request that is not allowed in the current state."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_OPERATION"


class InvalidCredentialsError(APIException):
    """Unknown email and wrong password share this one response."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "INVALID_CREDENTIALS"
    default_detail = "Invalid credentials"

    def __init__(self):
        super().__init__()


# 401
class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    default_detail = "Authentication required"
    default_headers = {"WWW-Authenticate": "Bearer"}


class TokenExpiredError(UnauthorizedError):
    default_detail = "Token has expired"


class InvalidTokenError(UnauthorizedError):
    default_detail = "Invalid token"


# 403
class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_detail = "Access forbidden"


class InsufficientPermissionsError(ForbiddenError):

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


class OwnershipError(ForbiddenError):
    """Acting user neither owns the record nor is an admin."""

    def __init__(self, action: str, resource: str):
        super().__init__(f"Unauthorized to {action} this {resource}")


# 404
class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"
        super().__init__(detail)


# 500
class InternalServerError(APIException):
    error_code = "INTERNAL_ERROR"
    default_detail = "Internal server error"


class UpstreamFailureError(APIException):
    """A call to the media host failed."""

    error_code = "UPSTREAM_FAILURE"
    default_detail = "Media service request failed"


class UploadFailedError(UpstreamFailureError):

    def __init__(self, error: Optional[str] = None):
        super().__init__("Image upload failed", error=error)


class MediaDeleteError(UpstreamFailureError):

    def __init__(self, public_id: str, error: Optional[str] = None):
        super().__init__(f"Failed to delete image '{public_id}'", error=error)
