"""
Property service: listing CRUD, ownership checks, image lifecycle and search.
"""

from typing import List, Optional, Sequence, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.models.property import Property, PropertyType
from app.models.user import User
from app.schemas.property import PropertyCreate, PropertyUpdate
from app.services.media import MediaService
from app.utils.exceptions import (
    InvalidQueryError,
    NotFoundError,
    OwnershipError,
    ValidationError
)
from app.utils.query_builder import Pagination, parse_price_range
from app.utils.validators import ValidationUtils
from app.config import get_settings
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Business logic for property listings.

    Images go to the media host before the row is written; if the write fails
    the fresh uploads are released again.
    """

    def __init__(self, db_session: AsyncSession, media: MediaService):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.media = media

    async def create_property(
        self,
        property_data: PropertyCreate,
        current_user: User,
        images: Sequence[UploadFile] = ()
    ) -> Property:
        image_urls = await self._upload_images(images)

        create_data = property_data.model_dump()
        create_data["bhk_type"] = property_data.bhk_type.value
        create_data["image_urls"] = image_urls
        create_data["owner_id"] = current_user.id

        try:
            property_obj = await self.property_repo.create(create_data)
        except Exception:
            await self.media.release_urls(image_urls)
            raise

        logger.info(f"Property created by user {current_user.email}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def get_property(self, property_id: str, record_view: bool = False) -> Property:
        """
        Load a property by id.

        Raises:
            InvalidIdFormatError: If ``property_id`` is not a UUID
            NotFoundError: If no such property exists
        """
        parsed_id = ValidationUtils.parse_id(property_id, "Property")
        property_obj = await self.property_repo.get_by_id(parsed_id)
        if not property_obj:
            raise NotFoundError("Property", str(parsed_id))

        if record_view:
            property_obj = await self.property_repo.increment_view_count(property_obj)
        return property_obj

    async def update_property(
        self,
        property_id: str,
        update_data: PropertyUpdate,
        current_user: User,
        images: Sequence[UploadFile] = ()
    ) -> Tuple[Property, List[str]]:
        """
        Partial update. New images replace the whole image list.

        Returns:
            Tuple of (updated property, old image URLs that could not be released)
        """
        property_obj = await self.get_property(property_id)
        self._ensure_can_manage(property_obj, current_user, "update")

        changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
        if "bhk_type" in changes:
            changes["bhk_type"] = changes["bhk_type"].value

        old_urls: List[str] = []
        if images:
            changes["image_urls"] = await self._upload_images(images)
            old_urls = list(property_obj.image_urls or [])

        if not changes:
            return property_obj, []

        try:
            property_obj = await self.property_repo.update(property_obj, changes)
        except Exception:
            await self.media.release_urls(changes.get("image_urls", []))
            raise

        failed = await self.media.release_urls(old_urls)
        logger.info(f"Property {property_obj.id} updated by user {current_user.email}: {sorted(changes)}")
        return property_obj, failed

    async def delete_property(self, property_id: str, current_user: User) -> List[str]:
        """
        Release every image, then delete the row.

        Returns:
            Image URLs the media host failed to delete
        """
        property_obj = await self.get_property(property_id)
        self._ensure_can_manage(property_obj, current_user, "delete")

        failed = await self.media.release_urls(property_obj.image_urls or [])
        if failed:
            logger.warning(f"Property {property_obj.id}: {len(failed)} image(s) could not be deleted")

        await self.property_repo.delete(property_obj.id)
        logger.info(f"Property {property_obj.id} deleted by user {current_user.email}")
        return failed

    async def search_properties(
        self,
        pagination: Pagination,
        search: Optional[str] = None,
        property_type: Optional[str] = None,
        price_range: Optional[str] = None,
        sort_by: Optional[str] = None,
        status: Optional[str] = None
    ) -> Tuple[List[Property], int]:
        filters = PropertySearchFilters(
            search_text=search,
            property_type=self._parse_property_type(property_type),
            price_range=parse_price_range(price_range),
            status=status.strip() if status and status.strip() else None,
            sort_by=sort_by
        )
        return await self.property_repo.search_properties(filters, pagination)

    async def get_user_properties(self, user: User, pagination: Pagination) -> Tuple[List[Property], int]:
        filters = PropertySearchFilters(owner_id=user.id)
        return await self.property_repo.search_properties(filters, pagination)

    async def _upload_images(self, images: Sequence[UploadFile]) -> List[str]:
        """Upload in order; on failure release what was already uploaded."""
        images = [image for image in images or [] if image is not None and image.filename]
        max_images = get_settings().max_property_images
        if len(images) > max_images:
            raise ValidationError(f"A property can have at most {max_images} images")

        urls: List[str] = []
        try:
            for image in images:
                urls.append(await self.media.upload(image))
        except Exception:
            await self.media.release_urls(urls)
            raise
        return urls

    @staticmethod
    def _parse_property_type(value: Optional[str]) -> Optional[PropertyType]:
        if value is None or not value.strip():
            return None
        try:
            return PropertyType(value.strip().lower())
        except ValueError:
            allowed = ", ".join(t.value for t in PropertyType)
            raise InvalidQueryError(f"Invalid propertyType '{value}'. Allowed: {allowed}")

    @staticmethod
    def _ensure_can_manage(property_obj: Property, user: User, action: str) -> None:
        if not user.can_manage(property_obj.owner_id):
            logger.warning(f"User {user.id} attempted to {action} property {property_obj.id} owned by {property_obj.owner_id}")
            raise OwnershipError(action, "property")
