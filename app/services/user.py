"""
User profile and admin account management.
"""

from typing import List, Optional, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.models.user import User, UserRole
from app.schemas.user import UserProfileUpdate, AdminUserUpdate
from app.services.media import MediaService
from app.utils.exceptions import (
    DuplicateEmailError,
    InsufficientPermissionsError,
    InvalidOperationError,
    InvalidQueryError,
    NotFoundError,
    ValidationError
)
from app.utils.query_builder import Pagination
from app.utils.validators import ValidationUtils
import logging

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, db_session: AsyncSession, media: MediaService):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.media = media

    async def update_profile(
        self,
        user: User,
        data: UserProfileUpdate,
        photo: Optional[UploadFile] = None
    ) -> User:
        """
        Update the caller's own profile.

        A new photo replaces the old one, which is then released best-effort.
        """
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        await self._ensure_email_available(update_data.get("email"), user)

        old_photo = None
        if photo is not None and photo.filename:
            update_data["photo"] = await self.media.upload(photo)
            old_photo = user.photo

        try:
            user = await self.user_repo.update(user, update_data)
        except Exception:
            if "photo" in update_data:
                await self.media.release_urls([update_data["photo"]])
            raise

        if old_photo:
            await self.media.release_urls([old_photo])

        logger.info(f"Profile updated for user {user.id}: {sorted(update_data)}")
        return user

    async def get_user(self, user_id: str) -> User:
        parsed_id = ValidationUtils.parse_id(user_id, "User")
        user = await self.user_repo.get_by_id(parsed_id)
        if not user:
            raise NotFoundError("User", str(parsed_id))
        return user

    async def list_users(
        self,
        admin: User,
        pagination: Pagination,
        query: Optional[str] = None,
        role: Optional[str] = None,
        is_admin: Optional[str] = None
    ) -> Tuple[List[User], int]:
        self._require_admin(admin, "list users")

        role_filter = None
        if role:
            try:
                role_filter = UserRole(role)
            except ValueError:
                raise InvalidQueryError(f"Invalid role '{role}'")

        admin_filter = ValidationUtils.parse_bool_flag(is_admin, "isAdmin")
        return await self.user_repo.search_users(
            pagination,
            query=query,
            role=role_filter,
            is_admin=admin_filter
        )

    async def admin_update_user(self, admin: User, user_id: str, data: AdminUserUpdate) -> User:
        """
        Admin edit of any account. A supplied password goes through the hash path.
        """
        self._require_admin(admin, "modify user data")
        user = await self.get_user(user_id)

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        password = update_data.pop("password", None)
        if "subscription_status" in update_data:
            update_data["subscription_status"] = update_data["subscription_status"].value

        await self._ensure_email_available(update_data.get("email"), user)

        if update_data:
            user = await self.user_repo.update(user, update_data)
        if password:
            try:
                user = await self.user_repo.update_password(user, password)
            except ValueError as e:
                raise ValidationError(str(e))

        logger.info(f"Admin {admin.id} updated user {user.id}")
        return user

    async def admin_delete_user(self, admin: User, user_id: str) -> List[str]:
        """
        Delete an account. Properties and room requests stay, orphaned.

        Returns:
            Photo URLs that could not be released
        """
        self._require_admin(admin, "delete users")
        user = await self.get_user(user_id)

        if user.id == admin.id:
            raise InvalidOperationError("You cannot delete your own account")

        photo = user.photo
        await self.user_repo.delete(user.id)
        logger.info(f"Admin {admin.id} deleted user {user.id}")

        return await self.media.release_urls([photo]) if photo else []

    async def _ensure_email_available(self, email: Optional[str], user: User) -> None:
        if email and email != user.email:
            if not await self.user_repo.check_email_availability(email, exclude_user_id=user.id):
                raise DuplicateEmailError()

    @staticmethod
    def _require_admin(user: User, action: str) -> None:
        if not user.is_admin:
            logger.warning(f"Non-admin {user.id} attempted to {action}")
            raise InsufficientPermissionsError(action)
