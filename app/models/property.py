"""
Property model for rental listings.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, JSON, Enum as SQLEnum, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


class PropertyType(str, enum.Enum):
    HOUSE = "house"
    APARTMENT = "apartment"
    PG = "pg"
    COMMERCIAL = "commercial"
    VILLA = "villa"
    SHARED_ROOM = "shared_room"


class BhkType(str, enum.Enum):
    """Room configuration. NONE is stored as an empty string."""
    RK1 = "1RK"
    BHK1 = "1BHK"
    BHK2 = "2BHK"
    BHK3 = "3BHK"
    BHK4_PLUS = "4BHK+"
    NONE = ""


class Property(Base):
    """
    Rental listing owned by a user.

    ``owner_id`` is nulled if the owning user is removed, the listing itself stays.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Street or neighbourhood"
    )

    rent: Mapped[float] = mapped_column(
        Numeric(precision=12, scale=2, asdecimal=False),
        nullable=False,
        index=True,
        comment="Monthly rent, at least 1"
    )

    deposit: Mapped[float] = mapped_column(
        Numeric(precision=12, scale=2, asdecimal=False),
        nullable=False,
        default=0
    )

    area: Mapped[float] = mapped_column(
        Numeric(precision=10, scale=2, asdecimal=False),
        nullable=False,
        comment="Area in square feet, at least 1"
    )

    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(
            PropertyType,
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
            length=20,
        ),
        nullable=False,
        index=True
    )

    no_of_bedroom: Mapped[int] = mapped_column(Integer, nullable=False)

    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    bhk_type: Mapped[str] = mapped_column(String(10), nullable=False, default="")

    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    allow_broker: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    image_urls: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered list of media host URLs"
    )

    status: Mapped[str] = mapped_column(String(30), nullable=False, default="Active", index=True)

    view_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Detail page views, used for popularity sorting"
    )

    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    owner: Mapped[Optional["User"]] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title}, rent={self.rent})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description or "",
            "city": self.city,
            "location": self.location,
            "rent": self.rent,
            "deposit": self.deposit or 0,
            "area": self.area,
            "property_type": self.property_type.value,
            "no_of_bedroom": self.no_of_bedroom,
            "bathrooms": self.bathrooms or 0,
            "bhk_type": self.bhk_type or "",
            "amenities": list(self.amenities or []),
            "allow_broker": self.allow_broker,
            "image_urls": list(self.image_urls or []),
            "status": self.status,
            "view_count": self.view_count or 0,
            "owner": self.owner.to_dict() if self.owner else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


Index("idx_property_city_rent", Property.city, Property.rent)
Index("idx_property_type_rent", Property.property_type, Property.rent)
