"""
Base repository class with common CRUD operations using async SQLAlchemy.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, and_
from app.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, Sequence, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic CRUD operations.
    Every write commits; on failure the session is rolled back and the error re-raised.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == id))
            obj = result.scalar_one_or_none()

            if obj is None:
                logger.debug(f"{self.model.__name__} with id {id} not found")
            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Apply a partial update to a loaded instance.

        Only keys present in ``obj_in`` are written; callers drop unset fields.
        """
        try:
            for field, value in obj_in.items():
                setattr(db_obj, field, value)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Updated {self.model.__name__} with id: {db_obj.id} fields: {list(obj_in)}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {db_obj.id}: {e}")
            raise

    async def delete(self, id: uuid.UUID) -> bool:
        try:
            result = await self.db.execute(delete(self.model).where(self.model.id == id))
            await self.db.commit()

            deleted = result.rowcount > 0
            if deleted:
                logger.debug(f"Deleted {self.model.__name__} with id: {id}")
            return deleted
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {id}: {e}")
            raise

    async def count(self, conditions: Optional[Sequence[Any]] = None) -> int:
        query = select(func.count(self.model.id))
        if conditions:
            query = query.where(and_(*conditions))
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def paginate(
        self,
        conditions: Sequence[Any],
        order_by: Sequence[Any],
        skip: int,
        limit: int,
        joins: Sequence[Any] = ()
    ) -> Tuple[List[ModelType], int]:
        """
        Run a filtered, ordered page query plus the matching total count.

        Returns:
            Tuple of (records on this page, total matching records)
        """
        try:
            query = select(self.model)
            count_query = select(func.count(self.model.id))
            for target, onclause in joins:
                query = query.outerjoin(target, onclause)
                count_query = count_query.outerjoin(target, onclause)

            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            total = (await self.db.execute(count_query)).scalar() or 0

            # id as final tie-breaker keeps paging stable
            query = query.order_by(*order_by, self.model.id).offset(skip).limit(limit)
            result = await self.db.execute(query)
            items = list(result.scalars().all())

            logger.debug(f"Retrieved {len(items)} of {total} {self.model.__name__} records")
            return items, total
        except Exception as e:
            logger.error(f"Failed to page {self.model.__name__} records: {e}")
            raise
