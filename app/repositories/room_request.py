"""
Room request repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Float, cast
from app.repositories.base import BaseRepository
from app.models.room_request import RoomRequest
from app.models.user import User, Gender
from app.utils.query_builder import PriceRange, Pagination, text_search_condition, resolve_sort
from typing import Optional, List, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)

# budget is stored as a numeric string
BUDGET_VALUE = cast(RoomRequest.budget, Float)

ROOM_REQUEST_SORT_OPTIONS = {
    "newest": [RoomRequest.created_at.desc()],
    "rent-low": [BUDGET_VALUE.asc(), RoomRequest.created_at.desc()],
    "rent-high": [BUDGET_VALUE.desc(), RoomRequest.created_at.desc()],
}


class RoomRequestSearchFilters:

    def __init__(
        self,
        search_text: Optional[str] = None,
        gender: Optional[Gender] = None,
        price_range: Optional[PriceRange] = None,
        user_id: Optional[uuid.UUID] = None,
        sort_by: Optional[str] = None
    ):
        self.search_text = search_text
        self.gender = gender
        self.price_range = price_range
        self.user_id = user_id
        self.sort_by = sort_by


class RoomRequestRepository(BaseRepository[RoomRequest]):

    def __init__(self, db: AsyncSession):
        super().__init__(RoomRequest, db)

    async def search_room_requests(
        self,
        filters: RoomRequestSearchFilters,
        pagination: Pagination
    ) -> Tuple[List[RoomRequest], int]:
        """
        Search room requests by location or requester name, gender and budget.

        Joins the requesting user only when a name or gender filter needs it.
        """
        order_by = resolve_sort(filters.sort_by, ROOM_REQUEST_SORT_OPTIONS)
        conditions = []
        joins = []

        search_condition = text_search_condition(
            filters.search_text,
            [RoomRequest.location, User.name],
        )
        if search_condition is not None:
            conditions.append(search_condition)

        if filters.gender is not None:
            conditions.append(User.gender == filters.gender)

        if search_condition is not None or filters.gender is not None:
            joins.append((User, RoomRequest.user_id == User.id))

        if filters.price_range is not None:
            conditions.append(filters.price_range.condition(BUDGET_VALUE))

        if filters.user_id is not None:
            conditions.append(RoomRequest.user_id == filters.user_id)

        return await self.paginate(
            conditions,
            order_by,
            skip=pagination.offset,
            limit=pagination.limit,
            joins=joins,
        )
