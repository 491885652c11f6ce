"""
Room request model: a user looking for a room or roommate.
"""

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


class RoomRequest(Base):
    __tablename__ = "room_requests"

    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    budget: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Numeric string, compared numerically when filtering"
    )

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    user: Mapped[Optional["User"]] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<RoomRequest(id={self.id}, location={self.location})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "location": self.location,
            "budget": self.budget,
            "user": self.user.to_dict() if self.user else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
