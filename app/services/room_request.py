"""
Room request service.
"""

from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.room_request import RoomRequestRepository, RoomRequestSearchFilters
from app.models.room_request import RoomRequest
from app.models.user import User, Gender
from app.schemas.room_request import RoomRequestCreate, RoomRequestUpdate
from app.utils.exceptions import ForbiddenError, InvalidQueryError, NotFoundError, OwnershipError
from app.utils.query_builder import Pagination, parse_price_range
from app.utils.validators import ValidationUtils
import logging

logger = logging.getLogger(__name__)


class RoomRequestService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.room_request_repo = RoomRequestRepository(db_session)

    async def create_room_request(self, data: RoomRequestCreate, current_user: User) -> RoomRequest:
        room_request = await self.room_request_repo.create({
            **data.model_dump(),
            "user_id": current_user.id,
        })
        logger.info(f"Room request {room_request.id} created by user {current_user.email}")
        return room_request

    async def get_room_request(self, room_request_id: str) -> RoomRequest:
        parsed_id = ValidationUtils.parse_id(room_request_id, "Room request")
        room_request = await self.room_request_repo.get_by_id(parsed_id)
        if not room_request:
            raise NotFoundError("Room request", str(parsed_id))
        return room_request

    async def update_room_request(
        self,
        room_request_id: str,
        data: RoomRequestUpdate,
        current_user: User
    ) -> RoomRequest:
        room_request = await self.get_room_request(room_request_id)
        self._ensure_can_manage(room_request, current_user, "update")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            return room_request
        return await self.room_request_repo.update(room_request, changes)

    async def delete_room_request(self, room_request_id: str, current_user: User) -> None:
        room_request = await self.get_room_request(room_request_id)
        self._ensure_can_manage(room_request, current_user, "delete")

        await self.room_request_repo.delete(room_request.id)
        logger.info(f"Room request {room_request.id} deleted by user {current_user.email}")

    async def list_room_requests(self, pagination: Pagination) -> Tuple[List[RoomRequest], int]:
        return await self.room_request_repo.search_room_requests(RoomRequestSearchFilters(), pagination)

    async def get_user_room_requests(self, user: User, pagination: Pagination) -> Tuple[List[RoomRequest], int]:
        filters = RoomRequestSearchFilters(user_id=user.id)
        return await self.room_request_repo.search_room_requests(filters, pagination)

    async def search_room_requests(
        self,
        pagination: Pagination,
        search: Optional[str] = None,
        gender: Optional[str] = None,
        price_range: Optional[str] = None,
        sort_by: Optional[str] = None
    ) -> Tuple[List[RoomRequest], int]:
        filters = RoomRequestSearchFilters(
            search_text=search,
            gender=self._parse_gender(gender),
            price_range=parse_price_range(price_range),
            sort_by=sort_by
        )
        return await self.room_request_repo.search_room_requests(filters, pagination)

    async def get_leads(self, current_user: User, pagination: Pagination) -> Tuple[List[RoomRequest], int]:
        """
        Room requests as broker leads. Requires an active broker subscription.
        """
        if not current_user.is_admin and not (current_user.is_broker and current_user.has_active_subscription):
            raise ForbiddenError("An active broker subscription is required to view leads")
        return await self.list_room_requests(pagination)

    @staticmethod
    def _parse_gender(value: Optional[str]) -> Optional[Gender]:
        if value is None or not value.strip():
            return None
        for gender in Gender:
            if gender.value.lower() == value.strip().lower():
                return gender
        raise InvalidQueryError(f"Invalid gender '{value}'")

    @staticmethod
    def _ensure_can_manage(room_request: RoomRequest, user: User, action: str) -> None:
        if not user.can_manage(room_request.user_id):
            logger.warning(f"User {user.id} attempted to {action} room request {room_request.id}")
            raise OwnershipError(action, "room request")
