"""
User endpoints: registration, login, profile and admin account management.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from typing import Optional
import logging

from app.models.user import User
from app.services.auth import AuthService
from app.services.user import UserService
from app.schemas.common import MessageResponse, parse_payload
from app.schemas.user import (
    UserRegister,
    LoginRequest,
    UserProfileUpdate,
    AdminUserUpdate,
    PasswordChangeRequest,
    UserResponse,
    RegisterResponse,
    LoginResponse,
    UserListResponse
)
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import (
    get_auth_service,
    get_user_service,
    get_current_user,
    get_current_admin_user,
    get_pagination
)
from app.utils.exceptions import APIException, InternalServerError
from app.utils.query_builder import Pagination

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"], responses=ERROR_RESPONSES)


def _user_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account. Multipart form with an optional `photo` file."
)
async def register(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    age: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    gender: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    auth_service: AuthService = Depends(get_auth_service)
) -> RegisterResponse:
    fields = dict(name=name, email=email, password=password, phone=phone, age=age,
                  role=role, location=location, gender=gender)
    data = parse_payload(UserRegister, {k: v for k, v in fields.items() if v is not None})

    try:
        user = await auth_service.register(data, photo)
        return RegisterResponse(user=_user_response(user))
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Registration failed for {data.email}: {e}")
        raise InternalServerError("Registration failed", error=str(e))


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    description="Exchange email and password for a bearer token."
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    try:
        user, token = await auth_service.login(login_data.email, login_data.password)
        return LoginResponse(user=_user_response(user), token=token)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {e}")
        raise InternalServerError("Login failed", error=str(e))


@router.get("/profile", response_model=UserResponse, summary="Get my profile")
async def get_profile(current_user: User = Depends(get_current_user)) -> UserResponse:
    return _user_response(current_user)


@router.put(
    "/profile",
    response_model=UserResponse,
    summary="Update my profile",
    description="Multipart form. A new `photo` replaces the old one. Passwords are changed via /profile/password."
)
async def update_profile(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    age: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    gender: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    fields = dict(name=name, email=email, phone=phone, age=age, location=location, gender=gender)
    data = parse_payload(UserProfileUpdate, {k: v for k, v in fields.items() if v is not None})

    try:
        user = await user_service.update_profile(current_user, data, photo)
        return _user_response(user)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Profile update failed for user {current_user.id}: {e}")
        raise InternalServerError("Failed to update profile", error=str(e))


@router.put("/profile/password", response_model=MessageResponse, summary="Change my password")
async def change_password(
    password_data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    try:
        await auth_service.change_password(
            current_user,
            password_data.current_password,
            password_data.new_password
        )
        return MessageResponse(message="Password updated successfully")
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Password change failed for user {current_user.id}: {e}")
        raise InternalServerError("Failed to change password", error=str(e))


@router.get(
    "/all",
    response_model=UserListResponse,
    summary="List users (admin)",
    description="Search by name or email, filter by role and isAdmin. Newest first."
)
async def list_users(
    query: Optional[str] = Query(None, description="Substring of name or email"),
    role: Optional[str] = Query(None, description="user or broker"),
    is_admin: Optional[str] = Query(None, alias="isAdmin", description="true or false"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> UserListResponse:
    try:
        users, total = await user_service.list_users(
            current_user, pagination, query=query, role=role, is_admin=is_admin
        )
        return UserListResponse(
            users=[_user_response(u) for u in users],
            pagination=pagination.meta(total)
        )
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to list users: {e}")
        raise InternalServerError("Failed to fetch users", error=str(e))


@router.get("/{user_id}", response_model=UserResponse, summary="Get user")
async def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    try:
        return _user_response(await user_service.get_user(user_id))
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch user {user_id}: {e}")
        raise InternalServerError("Failed to fetch user", error=str(e))


@router.put("/{user_id}", response_model=UserResponse, summary="Update user (admin)")
async def update_user(
    user_id: str,
    update_data: AdminUserUpdate,
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    try:
        user = await user_service.admin_update_user(current_user, user_id, update_data)
        return _user_response(user)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to update user {user_id}: {e}")
        raise InternalServerError("Failed to update user", error=str(e))


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete user (admin)")
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> MessageResponse:
    try:
        await user_service.admin_delete_user(current_user, user_id)
        return MessageResponse(message="User deleted successfully")
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete user {user_id}: {e}")
        raise InternalServerError("Failed to delete user", error=str(e))
