"""
Room request (roommate search) endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
import logging

from app.models.user import User
from app.services.room_request import RoomRequestService
from app.schemas.common import MessageResponse
from app.schemas.room_request import (
    RoomRequestCreate,
    RoomRequestUpdate,
    RoomRequestResponse,
    RoomRequestListResponse,
    RoomRequestCreatedResponse
)
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_current_user, get_pagination, get_room_request_service
from app.utils.exceptions import APIException, InternalServerError
from app.utils.query_builder import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/room-request", tags=["Room Requests"], responses=ERROR_RESPONSES)


def _to_list_response(room_requests, total: int, pagination: Pagination) -> RoomRequestListResponse:
    return RoomRequestListResponse(
        room_requests=[RoomRequestResponse.model_validate(r.to_dict()) for r in room_requests],
        pagination=pagination.meta(total)
    )


@router.post(
    "",
    response_model=RoomRequestCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create room request"
)
async def create_room_request(
    request_data: RoomRequestCreate,
    current_user: User = Depends(get_current_user),
    service: RoomRequestService = Depends(get_room_request_service)
) -> RoomRequestCreatedResponse:
    try:
        room_request = await service.create_room_request(request_data, current_user)
        return RoomRequestCreatedResponse(
            room_request=RoomRequestResponse.model_validate(room_request.to_dict())
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to create room request: {e}")
        raise InternalServerError("Failed to create room request", error=str(e))


@router.get("", response_model=RoomRequestListResponse, summary="List room requests")
@router.get("/all", response_model=RoomRequestListResponse, include_in_schema=False)
async def list_room_requests(
    pagination: Pagination = Depends(get_pagination),
    service: RoomRequestService = Depends(get_room_request_service)
) -> RoomRequestListResponse:
    try:
        room_requests, total = await service.list_room_requests(pagination)
        return _to_list_response(room_requests, total, pagination)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list room requests: {e}")
        raise InternalServerError("Failed to fetch room requests", error=str(e))


@router.get(
    "/search",
    response_model=RoomRequestListResponse,
    summary="Search room requests",
    description="Search by location or requester name, gender and budget range. sortBy: rent-low, rent-high, newest."
)
async def search_room_requests(
    search: Optional[str] = Query(None),
    gender: Optional[str] = Query(None),
    price_range: Optional[str] = Query(None, alias="priceRange"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    pagination: Pagination = Depends(get_pagination),
    service: RoomRequestService = Depends(get_room_request_service)
) -> RoomRequestListResponse:
    try:
        room_requests, total = await service.search_room_requests(
            pagination, search=search, gender=gender, price_range=price_range, sort_by=sort_by
        )
        return _to_list_response(room_requests, total, pagination)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Room request search failed: {e}")
        raise InternalServerError("Failed to search room requests", error=str(e))


@router.get("/user", response_model=RoomRequestListResponse, summary="List my room requests")
async def list_my_room_requests(
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    service: RoomRequestService = Depends(get_room_request_service)
) -> RoomRequestListResponse:
    try:
        room_requests, total = await service.get_user_room_requests(current_user, pagination)
        return _to_list_response(room_requests, total, pagination)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list room requests of user {current_user.id}: {e}")
        raise InternalServerError("Failed to fetch your room requests", error=str(e))


@router.get(
    "/leads",
    response_model=RoomRequestListResponse,
    summary="Broker leads",
    description="All room requests, for brokers with an active subscription."
)
async def list_leads(
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    service: RoomRequestService = Depends(get_room_request_service)
) -> RoomRequestListResponse:
    try:
        room_requests, total = await service.get_leads(current_user, pagination)
        return _to_list_response(room_requests, total, pagination)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list leads: {e}")
        raise InternalServerError("Failed to fetch leads", error=str(e))


@router.get("/{room_request_id}", response_model=RoomRequestResponse, summary="Get room request")
async def get_room_request(
    room_request_id: str,
    service: RoomRequestService = Depends(get_room_request_service)
) -> RoomRequestResponse:
    try:
        room_request = await service.get_room_request(room_request_id)
        return RoomRequestResponse.model_validate(room_request.to_dict())
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch room request {room_request_id}: {e}")
        raise InternalServerError("Failed to fetch room request", error=str(e))


@router.put("/{room_request_id}", response_model=RoomRequestResponse, summary="Update room request")
async def update_room_request(
    room_request_id: str,
    update_data: RoomRequestUpdate,
    current_user: User = Depends(get_current_user),
    service: RoomRequestService = Depends(get_room_request_service)
) -> RoomRequestResponse:
    try:
        room_request = await service.update_room_request(room_request_id, update_data, current_user)
        return RoomRequestResponse.model_validate(room_request.to_dict())
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to update room request {room_request_id}: {e}")
        raise InternalServerError("Failed to update room request", error=str(e))


@router.delete("/{room_request_id}", response_model=MessageResponse, summary="Delete room request")
async def delete_room_request(
    room_request_id: str,
    current_user: User = Depends(get_current_user),
    service: RoomRequestService = Depends(get_room_request_service)
) -> MessageResponse:
    try:
        await service.delete_room_request(room_request_id, current_user)
        return MessageResponse(message="Room request deleted successfully")
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete room request {room_request_id}: {e}")
        raise InternalServerError("Failed to delete room request", error=str(e))
