"""
Property listing endpoints: create, read, update, delete and search.
List and search are public, mutations require the owner (or an admin).
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import List, Optional
import logging

from app.models.user import User
from app.services.property import PropertyService
from app.schemas.common import parse_payload
from app.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
    PropertyCreatedResponse,
    PropertyUpdatedResponse,
    PropertyDeletedResponse
)
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_current_user, get_pagination, get_property_service
from app.utils.exceptions import APIException, InternalServerError
from app.utils.query_builder import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/property", tags=["Properties"], responses=ERROR_RESPONSES)


def _provided(**fields) -> dict:
    return {key: value for key, value in fields.items() if value is not None}


def _merge_values(*lists: Optional[List[str]]) -> Optional[List[str]]:
    """Form lists may arrive as ``amenities`` or ``amenities[]``; None when neither was sent."""
    if all(values is None for values in lists):
        return None
    return [value for values in lists if values for value in values]


def _to_list_response(properties, total: int, pagination: Pagination) -> PropertyListResponse:
    return PropertyListResponse(
        properties=[PropertyResponse.model_validate(p.to_dict()) for p in properties],
        pagination=pagination.meta(total)
    )


@router.post(
    "/register",
    response_model=PropertyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Create a listing owned by the caller. Multipart form with up to 10 `image` files."
)
async def create_property(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    rent: Optional[str] = Form(None),
    deposit: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    property_type: Optional[str] = Form(None, alias="propertyType"),
    no_of_bedroom: Optional[str] = Form(None, alias="noOfBedroom"),
    bathrooms: Optional[str] = Form(None),
    bhk_type: Optional[str] = Form(None, alias="bhkType"),
    amenities: Optional[List[str]] = Form(None),
    bracketed_amenities: Optional[List[str]] = Form(None, alias="amenities[]"),
    allow_broker: Optional[str] = Form(None, alias="allowBroker"),
    property_status: Optional[str] = Form(None, alias="status"),
    image: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyCreatedResponse:
    data = parse_payload(PropertyCreate, _provided(
        title=title,
        description=description,
        city=city,
        location=location,
        rent=rent,
        deposit=deposit,
        area=area,
        property_type=property_type,
        no_of_bedroom=no_of_bedroom,
        bathrooms=bathrooms,
        bhk_type=bhk_type,
        amenities=_merge_values(amenities, bracketed_amenities),
        allow_broker=allow_broker,
        status=property_status,
    ))

    try:
        property_obj = await property_service.create_property(data, current_user, image or [])
        return PropertyCreatedResponse(
            property_id=property_obj.id,
            property=PropertyResponse.model_validate(property_obj.to_dict())
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to create property: {e}")
        raise InternalServerError("Failed to create property", error=str(e))


@router.get(
    "/all",
    response_model=PropertyListResponse,
    summary="List properties",
    description="Paginated list, newest first, with optional search, propertyType and status filters."
)
async def list_properties(
    search: Optional[str] = Query(None, description="Substring of city, location or type"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    property_status: Optional[str] = Query(None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    try:
        properties, total = await property_service.search_properties(
            pagination,
            search=search,
            property_type=property_type,
            status=property_status
        )
        return _to_list_response(properties, total, pagination)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list properties: {e}")
        raise InternalServerError("Failed to fetch properties", error=str(e))


@router.get(
    "/search",
    response_model=PropertyListResponse,
    summary="Search properties",
    description=(
        "Search by text, property type and rent range (`min-max` or `min+`). "
        "sortBy: `rent-low`, `rent-high`, `popularity` or `newest` (default)."
    )
)
async def search_properties(
    search: Optional[str] = Query(None, description="Substring of city, location or type"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    price_range: Optional[str] = Query(None, alias="priceRange", examples=["1000-2000", "5000+"]),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    pagination: Pagination = Depends(get_pagination),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    try:
        properties, total = await property_service.search_properties(
            pagination,
            search=search,
            property_type=property_type,
            price_range=price_range,
            sort_by=sort_by
        )
        return _to_list_response(properties, total, pagination)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Property search failed: {e}")
        raise InternalServerError("Failed to search properties", error=str(e))


@router.get(
    "/my-properties",
    response_model=PropertyListResponse,
    summary="List my properties"
)
async def list_my_properties(
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    try:
        properties, total = await property_service.get_user_properties(current_user, pagination)
        return _to_list_response(properties, total, pagination)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list properties of user {current_user.id}: {e}")
        raise InternalServerError("Failed to fetch your properties", error=str(e))


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get property",
    description="Fetch one property with its owner. Each fetch counts as a view."
)
async def get_property(
    property_id: str,
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    try:
        property_obj = await property_service.get_property(property_id, record_view=True)
        return PropertyResponse.model_validate(property_obj.to_dict())
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch property {property_id}: {e}")
        raise InternalServerError("Failed to fetch property", error=str(e))


@router.put(
    "/{property_id}",
    response_model=PropertyUpdatedResponse,
    summary="Update property",
    description="Partial update by the owner. New `image` files replace all existing images."
)
async def update_property(
    property_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    rent: Optional[str] = Form(None),
    deposit: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    property_type: Optional[str] = Form(None, alias="propertyType"),
    no_of_bedroom: Optional[str] = Form(None, alias="noOfBedroom"),
    bathrooms: Optional[str] = Form(None),
    bhk_type: Optional[str] = Form(None, alias="bhkType"),
    amenities: Optional[List[str]] = Form(None),
    bracketed_amenities: Optional[List[str]] = Form(None, alias="amenities[]"),
    allow_broker: Optional[str] = Form(None, alias="allowBroker"),
    property_status: Optional[str] = Form(None, alias="status"),
    image: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyUpdatedResponse:
    data = parse_payload(PropertyUpdate, _provided(
        title=title,
        description=description,
        city=city,
        location=location,
        rent=rent,
        deposit=deposit,
        area=area,
        property_type=property_type,
        no_of_bedroom=no_of_bedroom,
        bathrooms=bathrooms,
        bhk_type=bhk_type,
        amenities=_merge_values(amenities, bracketed_amenities),
        allow_broker=allow_broker,
        status=property_status,
    ))

    try:
        property_obj, failed = await property_service.update_property(
            property_id, data, current_user, image or []
        )
        return PropertyUpdatedResponse(
            property=PropertyResponse.model_validate(property_obj.to_dict()),
            failed_image_deletions=failed
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to update property {property_id}: {e}")
        raise InternalServerError("Failed to update property", error=str(e))


@router.delete(
    "/{property_id}",
    response_model=PropertyDeletedResponse,
    summary="Delete property",
    description="Delete a property and release its images. Owner only."
)
async def delete_property(
    property_id: str,
    current_user: User = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyDeletedResponse:
    try:
        failed = await property_service.delete_property(property_id, current_user)
        return PropertyDeletedResponse(failed_image_deletions=failed)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete property {property_id}: {e}")
        raise InternalServerError("Failed to delete property", error=str(e))
