"""
Pydantic schemas for property requests and responses.
"""

from pydantic import Field, field_validator, model_validator
from typing import Any, List, Optional
from datetime import datetime
import uuid

from app.models.property import PropertyType, BhkType
from app.schemas.common import CamelModel, PaginationMeta
from app.utils.validators import ValidationUtils


class PropertyFields(CamelModel):
    """Validators shared by create and update."""

    @field_validator("title", "city", "location", check_fields=False)
    @classmethod
    def validate_required_text(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("amenities", check_fields=False)
    @classmethod
    def normalize_amenities(cls, v):
        if v is None:
            return v
        return ValidationUtils.normalize_string_list(v)


class PropertyCreate(PropertyFields):

    title: str = Field(..., max_length=255, examples=["Sunny 2BHK near the metro"])
    description: str = Field("", max_length=5000)
    city: str = Field(..., max_length=120, examples=["Pune"])
    location: str = Field(..., max_length=255, examples=["Baner Road"])
    rent: float = Field(..., ge=1, examples=[15000])
    deposit: float = Field(0, ge=0)
    area: float = Field(..., ge=1, examples=[850])
    property_type: PropertyType = Field(..., examples=["apartment"])
    no_of_bedroom: int = Field(..., ge=0, examples=[2])
    bathrooms: int = Field(0, ge=0)
    bhk_type: BhkType = BhkType.NONE
    amenities: List[str] = Field(default_factory=list, examples=[["Wifi", "AC"]])
    allow_broker: bool = True
    status: str = Field("Active", min_length=1, max_length=30)


class PropertyUpdate(PropertyFields):
    """Partial update. Owner, images and counters are not client writable."""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    city: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=255)
    rent: Optional[float] = Field(None, ge=1)
    deposit: Optional[float] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=1)
    property_type: Optional[PropertyType] = None
    no_of_bedroom: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    bhk_type: Optional[BhkType] = None
    amenities: Optional[List[str]] = None
    allow_broker: Optional[bool] = None
    status: Optional[str] = Field(None, min_length=1, max_length=30)


class OwnerSummary(CamelModel):
    id: Optional[uuid.UUID] = None
    name: str
    email: str
    phone: str = ""


UNKNOWN_OWNER = {"id": None, "name": "Unknown", "email": "Unknown", "phone": ""}


class PropertyResponse(CamelModel):
    """
    Property as returned to clients.

    ``owner`` is always an object and list fields are always lists.
    """

    id: uuid.UUID
    title: str
    description: str = ""
    city: str
    location: str
    rent: float
    deposit: float = 0
    area: float
    property_type: PropertyType
    no_of_bedroom: int
    bathrooms: int = 0
    bhk_type: str = ""
    amenities: List[str] = Field(default_factory=list)
    allow_broker: bool = True
    image_urls: List[str] = Field(default_factory=list)
    status: str = "Active"
    view_count: int = 0
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def fill_defaults(cls, data: Any):
        if isinstance(data, dict):
            data = dict(data)
            if not data.get("owner"):
                data["owner"] = dict(UNKNOWN_OWNER)
            for key in ("amenities", "image_urls"):
                if data.get(key) is None:
                    data[key] = []
        return data


class PropertyListResponse(CamelModel):
    properties: List[PropertyResponse]
    pagination: PaginationMeta


class PropertyCreatedResponse(CamelModel):
    message: str = "Property created successfully!"
    property_id: uuid.UUID
    property: PropertyResponse


class PropertyUpdatedResponse(CamelModel):
    message: str = "Property updated successfully"
    property: PropertyResponse
    failed_image_deletions: List[str] = Field(default_factory=list)


class PropertyDeletedResponse(CamelModel):
    message: str = "Property deleted successfully"
    failed_image_deletions: List[str] = Field(
        default_factory=list,
        description="Image URLs the media host could not delete"
    )
