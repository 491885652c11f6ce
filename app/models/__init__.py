"""
Database models for the Nestify API.
"""

from app.models.user import User, UserRole, Gender, SubscriptionStatus
from app.models.property import Property, PropertyType, BhkType
from app.models.room_request import RoomRequest

__all__ = [
    "User",
    "UserRole",
    "Gender",
    "SubscriptionStatus",
    "Property",
    "PropertyType",
    "BhkType",
    "RoomRequest",
]
