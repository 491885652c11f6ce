"""
Test configuration and fixtures for the Nestify API.
Provides an in-memory database, a fake media host, data factories and helpers.
"""

import os
import tempfile

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("UPLOAD_TEMP_DIR", os.path.join(tempfile.gettempdir(), "nestify-test-uploads"))

import io
import uuid
import pytest
from typing import AsyncGenerator, List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient
from fastapi import UploadFile
from PIL import Image

from app.main import app
from app.config import get_settings
from app.database import Database
from app.models.user import User, UserRole, Gender
from app.models.property import Property, PropertyType
from app.models.room_request import RoomRequest
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.repositories.room_request import RoomRequestRepository
from app.services.auth import AuthService
from app.services.media import MediaService, get_media_service, public_id_from_url
from app.utils.exceptions import MediaDeleteError, UploadFailedError
from app.utils.file_utils import FileValidator


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "secret123"


class FakeMediaService(MediaService):
    """
    In-memory stand-in for the Cloudinary delegate.
    Records uploads and deletions; can be told to fail either.
    """

    def __init__(self):
        super().__init__(get_settings())
        self.uploaded: List[str] = []
        self.deleted: List[str] = []
        self.fail_uploads = False
        self.fail_deletes: Set[str] = set()

    async def upload(self, file: UploadFile) -> str:
        await FileValidator.read_and_validate(file)
        if self.fail_uploads:
            raise UploadFailedError("simulated upload failure")
        url = f"https://res.cloudinary.com/test/image/upload/v1/image/{uuid.uuid4().hex}.jpg"
        self.uploaded.append(url)
        return url

    async def delete(self, public_id: str) -> bool:
        if public_id in self.fail_deletes:
            raise MediaDeleteError(public_id, "simulated delete failure")
        self.deleted.append(public_id)
        return True

    def public_ids(self, urls) -> List[str]:
        return [public_id_from_url(url) for url in urls]


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    db = Database(TEST_DATABASE_URL, engine=engine)
    await db.create_tables()
    yield db
    await db.drop_tables()
    await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def media() -> FakeMediaService:
    return FakeMediaService()


@pytest.fixture
async def async_client(database: Database, media: FakeMediaService) -> AsyncGenerator[AsyncClient, None]:
    """API client bound to the test database and fake media host."""
    app.state.db = database
    app.dependency_overrides[get_media_service] = lambda: media

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def room_request_repository(db_session: AsyncSession) -> RoomRequestRepository:
    return RoomRequestRepository(db_session)


@pytest.fixture
def auth_service(db_session: AsyncSession, media: FakeMediaService) -> AuthService:
    return AuthService(db_session, media)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        gender: Gender = Gender.OTHER,
        is_admin: bool = False,
        **overrides
    ) -> dict:
        data = {
            "email": email or f"user{uuid.uuid4().hex[:8]}@nestify.io",
            "password": password,
            "name": name,
            "role": role,
            "age": 28,
            "phone": "+919876543210",
            "location": "Pune",
            "gender": gender,
            "is_admin": is_admin,
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(owner_id: Optional[uuid.UUID], **overrides) -> dict:
        data = {
            "title": "Test Property",
            "description": "Bright flat close to the market",
            "city": "Pune",
            "location": "Baner",
            "rent": 15000,
            "deposit": 30000,
            "area": 850,
            "property_type": PropertyType.APARTMENT,
            "no_of_bedroom": 2,
            "bathrooms": 2,
            "bhk_type": "2BHK",
            "amenities": ["Wifi", "AC"],
            "allow_broker": True,
            "image_urls": [],
            "owner_id": owner_id,
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_property(property_repo: PropertyRepository, owner: Optional[User], **overrides) -> Property:
        owner_id = owner.id if owner is not None else None
        return await property_repo.create(PropertyFactory.create_property_data(owner_id, **overrides))


class RoomRequestFactory:

    @staticmethod
    async def create_room_request(
        room_request_repo: RoomRequestRepository,
        user: Optional[User],
        location: str = "Koramangala",
        budget: str = "12000"
    ) -> RoomRequest:
        return await room_request_repo.create({
            "location": location,
            "budget": budget,
            "user_id": user.id if user is not None else None,
        })


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="tenant@nestify.io", name="Tina Tenant")


@pytest.fixture
async def other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="other@nestify.io", name="Oscar Other")


@pytest.fixture
async def test_broker(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="broker@nestify.io",
        name="Bela Broker",
        role=UserRole.BROKER
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@nestify.io",
        name="Ada Admin",
        is_admin=True
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_user: User) -> Property:
    return await PropertyFactory.create_property(property_repository, test_user)


# Utility functions for tests
def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {AuthService.create_token(user)}"}


def make_image_bytes(fmt: str = "PNG", size=(8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(buffer, format=fmt)
    return buffer.getvalue()


def assert_error_body(response, status_code: int, code: Optional[str] = None, message: Optional[str] = None):
    """Assert the standard error envelope."""
    assert response.status_code == status_code, response.text
    body = response.json()
    assert isinstance(body["message"], str) and body["message"]
    assert "request_id" in body
    if code is not None:
        assert body["code"] == code
    if message is not None:
        assert body["message"] == message
    return body
