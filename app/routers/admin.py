"""
Admin dashboard endpoints.
"""

from fastapi import APIRouter, Depends

from app.models.user import User
from app.services.subscription import AdminService
from app.schemas.subscription import AdminStatsResponse
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_admin_service, get_current_admin_user

router = APIRouter(prefix="/admin", tags=["Admin"], responses=ERROR_RESPONSES)


@router.get("/stats", response_model=AdminStatsResponse, summary="Dashboard totals")
async def get_stats(
    current_user: User = Depends(get_current_admin_user),
    service: AdminService = Depends(get_admin_service)
) -> AdminStatsResponse:
    return AdminStatsResponse(**await service.get_stats(current_user))
