"""
Tests for registration, login, token handling and password changes.
"""

import uuid
import pytest
from datetime import timedelta
from httpx import AsyncClient

from app.models.user import User, UserRole, Gender
from app.repositories.user import UserRepository
from app.schemas.user import UserRegister
from app.services.auth import AuthService
from app.utils.auth import create_access_token, hash_password, verify_password, verify_token
from app.utils.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UnauthorizedError,
    ValidationError,
)
from tests.conftest import DEFAULT_PASSWORD, FakeMediaService, assert_error_body, auth_headers, make_image_bytes


REGISTER_URL = "/api/user/register"
LOGIN_URL = "/api/user/login"
PROFILE_URL = "/api/user/profile"


def registration_form(**overrides) -> dict:
    form = {
        "name": "Ann Renter",
        "email": "ann@nestify.io",
        "password": "secret1",
        "phone": "+11234567890",
        "age": "30",
        "location": "Bangalore",
        "gender": "Female",
    }
    form.update(overrides)
    return {key: value for key, value in form.items() if value is not None}


class TestPasswordUtils:

    def test_hash_and_verify(self):
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)

    def test_short_password_rejected(self):
        with pytest.raises(ValueError, match="at least 6 characters"):
            hash_password("12345")

    def test_empty_inputs_never_verify(self):
        assert not verify_password("", "whatever")
        assert not verify_password("secret1", "")


class TestTokens:

    def test_token_round_trip(self):
        user_id = uuid.uuid4()
        payload = verify_token(create_access_token(user_id, "broker", is_admin=True))
        assert payload.user_id == str(user_id)
        assert payload.role == "broker"
        assert payload.is_admin is True


class TestAuthService:
    """Service level checks against the in-memory database."""

    async def test_register_creates_user(self, auth_service: AuthService):
        data = UserRegister(
            name="Ann",
            email="ANN@Nestify.io",
            password="secret1",
            phone="+11234567890",
            age=30,
        )
        user = await auth_service.register(data)

        assert user.email == "ann@nestify.io"
        assert user.role == UserRole.USER
        assert user.gender == Gender.OTHER
        assert user.hashed_password != "secret1"
        assert user.photo == ""

    async def test_register_duplicate_email(self, auth_service: AuthService, test_user: User):
        data = UserRegister(
            name="Copy",
            email=test_user.email,
            password="secret1",
            phone="+11234567890",
            age=30,
        )
        with pytest.raises(DuplicateEmailError, match="User already exists"):
            await auth_service.register(data)

    async def test_login_success(self, auth_service: AuthService, test_user: User):
        user, token = await auth_service.login(test_user.email, DEFAULT_PASSWORD)
        assert user.id == test_user.id
        assert verify_token(token).user_id == str(test_user.id)

    async def test_login_is_case_insensitive_on_email(self, auth_service: AuthService, test_user: User):
        user, _ = await auth_service.login(test_user.email.upper(), DEFAULT_PASSWORD)
        assert user.id == test_user.id

    @pytest.mark.parametrize("email,password", [(None, "x"), ("a@b.io", None), ("  ", "x"), ("a@b.io", "")])
    async def test_login_requires_both_fields(self, auth_service: AuthService, email, password):
        with pytest.raises(ValidationError, match="Please provide email and password"):
            await auth_service.login(email, password)

    async def test_unknown_email_and_wrong_password_look_the_same(self, auth_service: AuthService, test_user: User):
        with pytest.raises(InvalidCredentialsError) as unknown:
            await auth_service.login("nobody@nestify.io", DEFAULT_PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong:
            await auth_service.login(test_user.email, "wrong-password")

        assert unknown.value.status_code == wrong.value.status_code == 400
        assert unknown.value.detail == wrong.value.detail == "Invalid credentials"

    async def test_get_current_user(self, auth_service: AuthService, test_user: User):
        token = AuthService.create_token(test_user)
        user = await auth_service.get_current_user(token)
        assert user.id == test_user.id

    async def test_missing_token(self, auth_service: AuthService):
        with pytest.raises(UnauthorizedError, match="No token provided"):
            await auth_service.get_current_user(None)

    async def test_expired_token(self, auth_service: AuthService, test_user: User):
        token = create_access_token(test_user.id, "user", expires_delta=timedelta(seconds=-30))
        with pytest.raises(TokenExpiredError):
            await auth_service.get_current_user(token)

    async def test_tampered_token(self, auth_service: AuthService, test_user: User):
        token = AuthService.create_token(test_user)
        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user(token[:-4] + "abcd")

    async def test_token_of_deleted_user(self, auth_service: AuthService):
        token = create_access_token(uuid.uuid4(), "user")
        with pytest.raises(UnauthorizedError, match="User not found"):
            await auth_service.get_current_user(token)

    async def test_change_password(self, auth_service: AuthService, user_repository: UserRepository, test_user: User):
        await auth_service.change_password(test_user, DEFAULT_PASSWORD, "brand-new-pass")
        assert await user_repository.authenticate_user(test_user.email, "brand-new-pass") is not None
        assert await user_repository.authenticate_user(test_user.email, DEFAULT_PASSWORD) is None

    async def test_change_password_requires_current(self, auth_service: AuthService, test_user: User):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.change_password(test_user, "not-my-password", "brand-new-pass")


class TestAuthAPI:
    """End-to-end checks through the HTTP layer."""

    async def test_register(self, async_client: AsyncClient):
        response = await async_client.post(REGISTER_URL, data=registration_form(role="broker"))

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["message"] == "User registered successfully"
        user = body["user"]
        assert user["email"] == "ann@nestify.io"
        assert user["role"] == "broker"
        assert user["gender"] == "Female"
        assert user["isAdmin"] is False
        assert user["subscriptionStatus"] == "inactive"
        assert "password" not in user
        assert "hashedPassword" not in user

    async def test_register_with_photo(self, async_client: AsyncClient, media: FakeMediaService):
        files = {"photo": ("me.png", make_image_bytes("PNG"), "image/png")}
        response = await async_client.post(REGISTER_URL, data=registration_form(), files=files)

        assert response.status_code == 201, response.text
        assert response.json()["user"]["photo"] == media.uploaded[0]

    async def test_register_rejects_non_image_photo(self, async_client: AsyncClient, media: FakeMediaService):
        files = {"photo": ("me.png", b"definitely not a png", "image/png")}
        response = await async_client.post(REGISTER_URL, data=registration_form(), files=files)

        assert_error_body(response, 400, "VALIDATION_ERROR")
        assert media.uploaded == []

    async def test_register_upload_failure_creates_no_user(self, async_client: AsyncClient, media: FakeMediaService):
        media.fail_uploads = True
        files = {"photo": ("me.png", make_image_bytes("PNG"), "image/png")}
        response = await async_client.post(REGISTER_URL, data=registration_form(), files=files)

        assert_error_body(response, 500, "UPSTREAM_FAILURE", "Image upload failed")

        login = await async_client.post(LOGIN_URL, json={"email": "ann@nestify.io", "password": "secret1"})
        assert login.status_code == 400

    async def test_register_duplicate_email(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(REGISTER_URL, data=registration_form(email=test_user.email))
        assert_error_body(response, 400, "CONFLICT", "User already exists")

    @pytest.mark.parametrize("overrides", [
        {"name": None},
        {"email": "not-an-email"},
        {"password": "123"},
        {"phone": "9876543210"},
        {"age": "abc"},
        {"role": "landlord"},
        {"gender": "unknown"},
    ])
    async def test_register_invalid_input(self, async_client: AsyncClient, overrides):
        response = await async_client.post(REGISTER_URL, data=registration_form(**overrides))
        body = assert_error_body(response, 400, "VALIDATION_ERROR")
        assert body["details"]

    async def test_login(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(LOGIN_URL, json={"email": test_user.email, "password": DEFAULT_PASSWORD})

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["message"] == "Login successful"
        assert body["user"]["id"] == str(test_user.id)
        assert verify_token(body["token"]).user_id == str(test_user.id)

    async def test_login_invalid_credentials(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post(LOGIN_URL, json={"email": test_user.email, "password": "wrong-pass"})
        assert_error_body(response, 400, "INVALID_CREDENTIALS", "Invalid credentials")

    async def test_login_missing_fields(self, async_client: AsyncClient):
        response = await async_client.post(LOGIN_URL, json={"email": "ann@nestify.io"})
        assert_error_body(response, 400, "VALIDATION_ERROR", "Please provide email and password")

    async def test_profile_requires_token(self, async_client: AsyncClient):
        response = await async_client.get(PROFILE_URL)
        assert_error_body(response, 401, "UNAUTHORIZED", "No token provided")

    async def test_profile_rejects_garbage_token(self, async_client: AsyncClient):
        response = await async_client.get(PROFILE_URL, headers={"Authorization": "Bearer garbage"})
        assert_error_body(response, 401, "UNAUTHORIZED", "Invalid token")

    async def test_profile_rejects_expired_token(self, async_client: AsyncClient, test_user: User):
        token = create_access_token(test_user.id, "user", expires_delta=timedelta(seconds=-30))
        response = await async_client.get(PROFILE_URL, headers={"Authorization": f"Bearer {token}"})
        assert_error_body(response, 401, "UNAUTHORIZED", "Token has expired")

    async def test_profile(self, async_client: AsyncClient, test_user: User):
        response = await async_client.get(PROFILE_URL, headers=auth_headers(test_user))

        assert response.status_code == 200
        assert response.json()["email"] == test_user.email

    async def test_change_password(self, async_client: AsyncClient, test_user: User):
        response = await async_client.put(
            f"{PROFILE_URL}/password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "another-secret"},
            headers=auth_headers(test_user)
        )
        assert response.status_code == 200, response.text
        assert response.json()["message"] == "Password updated successfully"

        login = await async_client.post(LOGIN_URL, json={"email": test_user.email, "password": "another-secret"})
        assert login.status_code == 200

    async def test_change_password_wrong_current(self, async_client: AsyncClient, test_user: User):
        response = await async_client.put(
            f"{PROFILE_URL}/password",
            json={"currentPassword": "nope-nope", "newPassword": "another-secret"},
            headers=auth_headers(test_user)
        )
        assert_error_body(response, 400, "INVALID_CREDENTIALS")

    async def test_register_login_profile_scenario(self, async_client: AsyncClient):
        form = {"name": "Ann", "email": "a@x.com", "password": "secret1", "phone": "+11234567890", "age": "30"}
        registered = await async_client.post(REGISTER_URL, data=form)
        assert registered.status_code == 201, registered.text

        login = await async_client.post(LOGIN_URL, json={"email": "a@x.com", "password": "secret1"})
        assert login.status_code == 200
        token = login.json()["token"]

        profile = await async_client.get(PROFILE_URL, headers={"Authorization": f"Bearer {token}"})
        assert profile.status_code == 200
        assert profile.json()["name"] == "Ann"
        assert "password" not in profile.json()
