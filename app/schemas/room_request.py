"""
Pydantic schemas for room (roommate) requests.
"""

from pydantic import Field, field_validator, model_validator
from typing import Any, List, Optional
from datetime import datetime
import uuid

from app.models.user import Gender
from app.schemas.common import CamelModel, PaginationMeta
from app.utils.validators import ValidationUtils


def _clean_location(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not value.strip():
        raise ValueError("Location cannot be empty")
    return value.strip()


class RoomRequestCreate(CamelModel):
    location: str = Field(..., min_length=1, max_length=255, examples=["Koramangala"])
    budget: str = Field(..., examples=["12000"])

    @field_validator("location")
    @classmethod
    def strip_location(cls, v):
        return _clean_location(v)

    @field_validator("budget", mode="before")
    @classmethod
    def validate_budget(cls, v):
        return ValidationUtils.validate_budget(v)


class RoomRequestUpdate(CamelModel):
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    budget: Optional[str] = None

    @field_validator("location")
    @classmethod
    def strip_location(cls, v):
        return _clean_location(v)

    @field_validator("budget", mode="before")
    @classmethod
    def validate_budget(cls, v):
        return ValidationUtils.validate_budget(v) if v is not None else v


class RequesterSummary(CamelModel):
    id: Optional[uuid.UUID] = None
    name: str
    gender: Gender = Gender.OTHER
    photo: str = ""


UNKNOWN_REQUESTER = {"id": None, "name": "Unknown", "gender": Gender.OTHER, "photo": ""}


class RoomRequestResponse(CamelModel):
    id: uuid.UUID
    location: str
    budget: str
    user: RequesterSummary
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def fill_user(cls, data: Any):
        if isinstance(data, dict) and not data.get("user"):
            data = {**data, "user": dict(UNKNOWN_REQUESTER)}
        return data


class RoomRequestListResponse(CamelModel):
    room_requests: List[RoomRequestResponse]
    pagination: PaginationMeta


class RoomRequestCreatedResponse(CamelModel):
    message: str = "Room request created successfully"
    room_request: RoomRequestResponse
