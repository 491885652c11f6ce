"""
Utility modules for the Nestify API.
"""

from .auth import (
    create_access_token,
    verify_token,
    hash_password,
    verify_password,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    InvalidQueryError,
    InvalidIdFormatError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    InvalidOperationError,
    UpstreamFailureError,
    InternalServerError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InsufficientPermissionsError,
    OwnershipError,
    DuplicateEmailError,
    UploadFailedError,
    MediaDeleteError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "create_access_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "TokenPayload",
    "APIException",
    "ValidationError",
    "InvalidQueryError",
    "InvalidIdFormatError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "InvalidOperationError",
    "UpstreamFailureError",
    "InternalServerError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InsufficientPermissionsError",
    "OwnershipError",
    "DuplicateEmailError",
    "UploadFailedError",
    "MediaDeleteError",
]
