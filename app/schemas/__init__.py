"""
Pydantic schemas for request/response validation.
"""

from .common import CamelModel, PaginationMeta, MessageResponse, parse_payload

from .user import (
    UserRegister,
    LoginRequest,
    UserProfileUpdate,
    AdminUserUpdate,
    PasswordChangeRequest,
    UserResponse,
    RegisterResponse,
    LoginResponse,
    UserListResponse
)

from .property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyCreatedResponse,
    PropertyUpdatedResponse,
    PropertyDeletedResponse,
    OwnerSummary
)

from .room_request import (
    RoomRequestCreate,
    RoomRequestUpdate,
    RoomRequestResponse,
    RoomRequestListResponse,
    RoomRequestCreatedResponse
)

from .subscription import (
    SubscriptionStatusResponse,
    PurchaseRequest,
    PurchaseResponse,
    AdminStatsResponse
)

__all__ = [
    "CamelModel",
    "PaginationMeta",
    "MessageResponse",
    "parse_payload",
    "UserRegister",
    "LoginRequest",
    "UserProfileUpdate",
    "AdminUserUpdate",
    "PasswordChangeRequest",
    "UserResponse",
    "RegisterResponse",
    "LoginResponse",
    "UserListResponse",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyCreatedResponse",
    "PropertyUpdatedResponse",
    "PropertyDeletedResponse",
    "OwnerSummary",
    "RoomRequestCreate",
    "RoomRequestUpdate",
    "RoomRequestResponse",
    "RoomRequestListResponse",
    "RoomRequestCreatedResponse",
    "SubscriptionStatusResponse",
    "PurchaseRequest",
    "PurchaseResponse",
    "AdminStatsResponse",
]
