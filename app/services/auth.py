"""
Authentication service: registration, login and bearer token resolution.
"""

from typing import Optional, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from jose import ExpiredSignatureError, JWTError
from app.repositories.user import UserRepository
from app.models.user import User
from app.schemas.user import UserRegister
from app.services.media import MediaService
from app.utils.auth import create_access_token, verify_token
from app.utils.exceptions import (
    APIException,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UnauthorizedError,
    ValidationError,
    DuplicateEmailError,
    InternalServerError
)
from app.utils.validators import ValidationUtils
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Credential and session handling.
    Tokens are stateless; every request re-resolves its user from the database.
    """

    def __init__(self, db_session: AsyncSession, media: Optional[MediaService] = None):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.media = media

    async def register(self, data: UserRegister, photo: Optional[UploadFile] = None) -> User:
        """
        Create an account, uploading the optional photo first.

        Raises:
            DuplicateEmailError: If the email is already registered
            UploadFailedError: If the photo upload fails; no user is created
        """
        if not await self.user_repo.check_email_availability(data.email):
            logger.warning(f"Registration rejected, email already in use: {data.email}")
            raise DuplicateEmailError()

        photo_url = ""
        if photo is not None and photo.filename:
            if self.media is None:
                raise InternalServerError("Media service unavailable")
            photo_url = await self.media.upload(photo)

        user_data = data.model_dump()
        user_data["photo"] = photo_url

        try:
            user = await self.user_repo.create_user(user_data)
        except ValueError as e:
            await self._release_photo(photo_url)
            if "already exists" in str(e):
                raise DuplicateEmailError()
            raise ValidationError(str(e))
        except Exception:
            await self._release_photo(photo_url)
            raise

        logger.info(f"Registered user {user.email} (role={user.role.value})")
        return user

    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Check credentials and issue an access token.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        if not email or not email.strip() or not password:
            raise ValidationError("Please provide email and password")

        user = await self.user_repo.authenticate_user(email, password)
        if not user:
            logger.warning(f"Failed login attempt for email: {email}")
            raise InvalidCredentialsError()

        token = self.create_token(user)
        logger.info(f"User logged in: {user.email}")
        return user, token

    @staticmethod
    def create_token(user: User) -> str:
        return create_access_token(
            user_id=user.id,
            role=user.role.value,
            is_admin=user.is_admin
        )

    async def get_current_user(self, token: Optional[str]) -> User:
        """
        Resolve a bearer token to a live user.

        Raises:
            UnauthorizedError: Missing token or the user no longer exists
            TokenExpiredError: Token past its expiry
            InvalidTokenError: Bad signature, type or payload
        """
        if not token:
            raise UnauthorizedError("No token provided")

        try:
            payload = verify_token(token)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidTokenError()

        try:
            user_id = ValidationUtils.parse_id(payload.user_id, "User")
        except APIException:
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise UnauthorizedError("User not found")
        return user

    async def change_password(self, user: User, current_password: str, new_password: str) -> User:
        if not user.verify_password(current_password):
            raise InvalidCredentialsError()
        try:
            return await self.user_repo.update_password(user, new_password)
        except ValueError as e:
            raise ValidationError(str(e))

    async def _release_photo(self, url: str) -> None:
        if url and self.media is not None:
            await self.media.release_urls([url])
