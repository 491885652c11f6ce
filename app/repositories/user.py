"""
User repository for credential lookups and admin listing.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole
from app.utils.auth import pwd_context
from app.utils.query_builder import text_search_condition, Pagination
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a user, hashing the plaintext ``password`` entry.

        Raises:
            ValueError: If the email is taken or the password is too short
        """
        email = user_data["email"].lower().strip()
        if await self.get_by_email(email):
            raise ValueError(f"User with email {email} already exists")

        create_data = dict(user_data)
        password = create_data.pop("password")
        create_data["email"] = email

        user = User(**create_data)
        user.set_password(password)

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create user {email}: {e}")
            raise

        logger.info(f"Created user: {user.email} (ID: {user.id})")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        normalized_email = email.lower().strip()
        result = await self.db.execute(select(User).where(User.email == normalized_email))
        return result.scalar_one_or_none()

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Return the user when email and password match, else None.

        Unknown emails still pay for one hash verification.
        """
        user = await self.get_by_email(email)

        if not user:
            pwd_context.dummy_verify()
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return user

    async def update_password(self, user: User, new_password: str) -> User:
        try:
            user.set_password(new_password)
            await self.db.commit()
            await self.db.refresh(user)
            logger.info(f"Password updated for user: {user.email}")
            return user
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update password for user {user.id}: {e}")
            raise

    async def check_email_availability(self, email: str, exclude_user_id: Optional[uuid.UUID] = None) -> bool:
        query = select(func.count(User.id)).where(User.email == email.lower().strip())
        if exclude_user_id:
            query = query.where(User.id != exclude_user_id)
        result = await self.db.execute(query)
        return (result.scalar() or 0) == 0

    async def search_users(
        self,
        pagination: Pagination,
        query: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_admin: Optional[bool] = None
    ) -> Tuple[List[User], int]:
        """
        Admin listing: escaped substring over name/email plus role and admin flag filters.
        Newest accounts first.
        """
        conditions = []
        search_condition = text_search_condition(query, [User.name, User.email])
        if search_condition is not None:
            conditions.append(search_condition)
        if role is not None:
            conditions.append(User.role == role)
        if is_admin is not None:
            conditions.append(User.is_admin == is_admin)

        return await self.paginate(
            conditions,
            [User.created_at.desc()],
            skip=pagination.offset,
            limit=pagination.limit,
        )

    async def count_by_role(self, role: UserRole) -> int:
        return await self.count([User.role == role])
