"""
Property repository with search, filtering and popularity tracking.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import String, cast, update
from app.repositories.base import BaseRepository
from app.models.property import Property, PropertyType
from app.utils.query_builder import PriceRange, Pagination, text_search_condition, resolve_sort
from typing import Optional, List, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


PROPERTY_SORT_OPTIONS = {
    "newest": [Property.created_at.desc()],
    "rent-low": [Property.rent.asc(), Property.created_at.desc()],
    "rent-high": [Property.rent.desc(), Property.created_at.desc()],
    "popularity": [Property.view_count.desc(), Property.created_at.desc()],
}


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        search_text: Optional[str] = None,
        property_type: Optional[PropertyType] = None,
        price_range: Optional[PriceRange] = None,
        status: Optional[str] = None,
        owner_id: Optional[uuid.UUID] = None,
        sort_by: Optional[str] = None
    ):
        self.search_text = search_text
        self.property_type = property_type
        self.price_range = price_range
        self.status = status
        self.owner_id = owner_id
        self.sort_by = sort_by


class PropertyRepository(BaseRepository[Property]):

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        pagination: Pagination
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filters, sorting and pagination.

        Returns:
            Tuple of (properties list, total count)

        Raises:
            InvalidQueryError: If ``filters.sort_by`` is unknown
        """
        order_by = resolve_sort(filters.sort_by, PROPERTY_SORT_OPTIONS)
        conditions = self._build_filter_conditions(filters)

        properties, total = await self.paginate(
            conditions,
            order_by,
            skip=pagination.offset,
            limit=pagination.limit,
        )
        logger.debug(f"Property search returned {len(properties)} of {total} results")
        return properties, total

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        conditions = []

        search_condition = text_search_condition(
            filters.search_text,
            [Property.city, Property.location, cast(Property.property_type, String)],
        )
        if search_condition is not None:
            conditions.append(search_condition)

        if filters.property_type is not None:
            conditions.append(Property.property_type == filters.property_type)

        if filters.price_range is not None:
            conditions.append(filters.price_range.condition(Property.rent))

        if filters.status:
            conditions.append(Property.status == filters.status)

        if filters.owner_id is not None:
            conditions.append(Property.owner_id == filters.owner_id)

        return conditions

    async def increment_view_count(self, property_obj: Property) -> Property:
        """
        Atomically bump the view counter without touching ``updated_at``.
        """
        try:
            await self.db.execute(
                update(Property)
                .where(Property.id == property_obj.id)
                .values(
                    view_count=Property.view_count + 1,
                    updated_at=Property.updated_at,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            await self.db.refresh(property_obj)
            return property_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to record view for property {property_obj.id}: {e}")
            raise
