"""
API routers.
"""

from app.routers import admin, properties, room_requests, subscriptions, users

__all__ = ["admin", "properties", "room_requests", "subscriptions", "users"]
