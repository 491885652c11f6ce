"""
Subscription endpoints. Purchasing only flips the status; no payment is taken.
"""

from fastapi import APIRouter, Depends
import logging

from app.models.user import User
from app.services.subscription import SubscriptionService
from app.schemas.subscription import SubscriptionStatusResponse, PurchaseRequest, PurchaseResponse
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_current_user, get_subscription_service
from app.utils.exceptions import APIException, InternalServerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["Subscription"], responses=ERROR_RESPONSES)


@router.get("/status", response_model=SubscriptionStatusResponse, summary="Subscription status")
async def get_status(current_user: User = Depends(get_current_user)) -> SubscriptionStatusResponse:
    return SubscriptionStatusResponse(**SubscriptionService.get_status(current_user))


@router.post("/purchase", response_model=PurchaseResponse, summary="Purchase a plan")
async def purchase(
    purchase_data: PurchaseRequest,
    current_user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service)
) -> PurchaseResponse:
    try:
        user = await service.purchase(current_user, purchase_data.plan)
        return PurchaseResponse(
            message=f"Successfully subscribed to {user.subscription_plan} plan",
            status=user.subscription_status,
            plan=user.subscription_plan
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Subscription purchase failed for user {current_user.id}: {e}")
        raise InternalServerError("Failed to purchase subscription", error=str(e))
