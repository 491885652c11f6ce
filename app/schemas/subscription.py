"""
Schemas for subscription status and the admin dashboard.
"""

from pydantic import Field
from typing import Optional

from app.schemas.common import CamelModel


class SubscriptionStatusResponse(CamelModel):
    status: str = Field(..., examples=["inactive"])
    plan: Optional[str] = None


class PurchaseRequest(CamelModel):
    plan: Optional[str] = Field(None, max_length=50, examples=["premium"])


class PurchaseResponse(CamelModel):
    message: str
    status: str
    plan: str


class AdminStatsResponse(CamelModel):
    total_users: int
    total_properties: int
    total_room_requests: int
    total_brokers: int
