"""
Subscription toggling and admin dashboard statistics.
No payment is taken; purchasing simply activates the account.
"""

from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User, UserRole, SubscriptionStatus
from app.models.property import Property
from app.models.room_request import RoomRequest
from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.utils.exceptions import InsufficientPermissionsError, ValidationError
import logging

logger = logging.getLogger(__name__)


class SubscriptionService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    @staticmethod
    def get_status(user: User) -> Dict[str, Optional[str]]:
        return {
            "status": user.subscription_status or SubscriptionStatus.INACTIVE.value,
            "plan": user.subscription_plan,
        }

    async def purchase(self, user: User, plan: Optional[str]) -> User:
        if not plan or not plan.strip():
            raise ValidationError("Plan is required")

        user = await self.user_repo.update(user, {
            "subscription_status": SubscriptionStatus.ACTIVE.value,
            "subscription_plan": plan.strip(),
        })
        logger.info(f"User {user.id} subscribed to plan {user.subscription_plan}")
        return user


class AdminService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.property_repo = BaseRepository(Property, db_session)
        self.room_request_repo = BaseRepository(RoomRequest, db_session)

    async def get_stats(self, admin: User) -> Dict[str, int]:
        if not admin.is_admin:
            raise InsufficientPermissionsError("view dashboard statistics")

        return {
            "total_users": await self.user_repo.count(),
            "total_properties": await self.property_repo.count(),
            "total_room_requests": await self.room_request_repo.count(),
            "total_brokers": await self.user_repo.count_by_role(UserRole.BROKER),
        }
