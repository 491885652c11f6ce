"""
User model with credentials, profile and subscription state.
"""

from sqlalchemy import String, Integer, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from app.utils.auth import hash_password, verify_password
import enum
import uuid
from typing import Optional


class UserRole(str, enum.Enum):
    """Marketplace role. Admin rights are a separate flag."""
    USER = "user"
    BROKER = "broker"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    """
    Account of a tenant, owner or broker.
    The password is only ever stored as a bcrypt hash.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, native_enum=False, values_callable=_enum_values, length=20),
        nullable=False,
        default=UserRole.USER,
        index=True
    )

    age: Mapped[int] = mapped_column(Integer, nullable=False)

    phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="E.164 style phone number, + followed by 10-15 digits"
    )

    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    photo: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
        comment="Public URL on the media host"
    )

    gender: Mapped[Gender] = mapped_column(
        SQLEnum(Gender, native_enum=False, values_callable=_enum_values, length=10),
        nullable=False,
        default=Gender.OTHER,
        index=True
    )

    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True
    )

    subscription_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SubscriptionStatus.INACTIVE.value
    )

    subscription_plan: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    def set_password(self, password: str) -> None:
        self.hashed_password = hash_password(password)

    def verify_password(self, password: str) -> bool:
        return verify_password(password, self.hashed_password)

    @property
    def is_broker(self) -> bool:
        return self.role == UserRole.BROKER

    @property
    def has_active_subscription(self) -> bool:
        return self.subscription_status == SubscriptionStatus.ACTIVE.value

    def can_manage(self, owner_id: Optional[uuid.UUID]) -> bool:
        """
        Check if user may mutate a resource owned by ``owner_id``.

        Admins can manage everything, everyone else only their own records.
        """
        if self.is_admin:
            return True
        return owner_id is not None and self.id == owner_id

    def to_dict(self) -> dict:
        """Convert user to dictionary, never including the password hash."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "age": self.age,
            "phone": self.phone,
            "location": self.location or "",
            "photo": self.photo or "",
            "gender": self.gender.value,
            "is_admin": self.is_admin,
            "subscription_status": self.subscription_status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
