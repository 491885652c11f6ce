"""
Repository layer for data access operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.room_request import RoomRequestRepository, RoomRequestSearchFilters
from app.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "RoomRequestRepository",
    "RoomRequestSearchFilters",
    "UserRepository",
]
