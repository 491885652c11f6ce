"""
Pydantic schemas for user registration, login, profile and admin management.
"""

from pydantic import EmailStr, Field, field_validator
from typing import List, Optional
from datetime import datetime
import uuid

from app.models.user import UserRole, Gender, SubscriptionStatus
from app.schemas.common import CamelModel, PaginationMeta
from app.utils.auth import MIN_PASSWORD_LENGTH
from app.utils.validators import ValidationUtils


class UserRegister(CamelModel):
    """Registration form. The photo file travels separately."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Ann"])
    email: EmailStr = Field(..., examples=["ann@nestify.io"])
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)
    phone: str = Field(..., examples=["+11234567890"])
    age: int = Field(..., ge=1, le=120, examples=[30])
    role: UserRole = UserRole.USER
    location: str = Field("", max_length=255)
    gender: Gender = Gender.OTHER

    @field_validator("name", "location")
    @classmethod
    def strip_text(cls, v):
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return str(v).lower().strip()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return ValidationUtils.validate_phone(v)


class LoginRequest(CamelModel):
    """Both fields are checked by the service so a missing one is a plain 400."""

    email: Optional[str] = Field(None, examples=["ann@nestify.io"])
    password: Optional[str] = Field(None, examples=["secret1"])


class UserProfileUpdate(CamelModel):
    """Self-service profile update. Password changes use PasswordChangeRequest."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    age: Optional[int] = Field(None, ge=1, le=120)
    location: Optional[str] = Field(None, max_length=255)
    gender: Optional[Gender] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return str(v).lower().strip() if v is not None else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return ValidationUtils.validate_phone(v) if v is not None else v


class AdminUserUpdate(UserProfileUpdate):
    """Admin edit of any account. A supplied password is re-hashed."""

    role: Optional[UserRole] = None
    is_admin: Optional[bool] = None
    subscription_status: Optional[SubscriptionStatus] = None
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH, max_length=128)


class PasswordChangeRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)


class UserResponse(CamelModel):
    """User as returned to clients; there is no password field."""

    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    age: int
    phone: str
    location: str = ""
    photo: str = ""
    gender: Gender
    is_admin: bool
    subscription_status: str
    created_at: datetime
    updated_at: datetime


class RegisterResponse(CamelModel):
    message: str = "User registered successfully"
    user: UserResponse


class LoginResponse(CamelModel):
    message: str = "Login successful"
    user: UserResponse
    token: str


class UserListResponse(CamelModel):
    users: List[UserResponse]
    pagination: PaginationMeta
