"""
FastAPI dependency injection utilities for services and the acting user.
"""

from typing import Optional
from fastapi import Depends, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.user import User
from app.services.auth import AuthService
from app.services.user import UserService
from app.services.property import PropertyService
from app.services.room_request import RoomRequestService
from app.services.subscription import SubscriptionService, AdminService
from app.services.media import MediaService, get_media_service
from app.utils.exceptions import UnauthorizedError, InsufficientPermissionsError
from app.utils.query_builder import Pagination


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    media: MediaService = Depends(get_media_service)
) -> AuthService:
    return AuthService(db, media)


async def get_user_service(
    db: AsyncSession = Depends(get_db),
    media: MediaService = Depends(get_media_service)
) -> UserService:
    return UserService(db, media)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    media: MediaService = Depends(get_media_service)
) -> PropertyService:
    return PropertyService(db, media)


async def get_room_request_service(db: AsyncSession = Depends(get_db)) -> RoomRequestService:
    return RoomRequestService(db)


async def get_subscription_service(db: AsyncSession = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(db)


async def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: If the token is missing, invalid or expired,
            or its user no longer exists
    """
    if not credentials:
        raise UnauthorizedError("No token provided")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise InsufficientPermissionsError("access admin resources")
    return current_user


def get_pagination(
    page: Optional[str] = Query(None, description="Page number, default 1"),
    limit: Optional[str] = Query(None, description="Items per page, default 10")
) -> Pagination:
    """
    Lenient page/limit parsing: non-numbers fall back to defaults, values floor at 1.
    """
    return Pagination(page, limit)
