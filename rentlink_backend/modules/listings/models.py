"""Listing models.

A property has two independent flags: the admin moderation state
(approval_status) and the landlord's listed/unlisted toggle (is_available).
A property can only be listed once it is approved.
"""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ...core.database_types import value_enum
from ...database import Base, TimestampMixin
from ..auth.models import User


class PropertyType(str, enum.Enum):
    """Kinds of rentable property."""

    APARTMENT = "apartment"
    HOUSE = "house"
    ROOM = "room"
    COMMERCIAL = "commercial"


class ApprovalStatus(str, enum.Enum):
    """Admin moderation state, shared by listings and verification requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Property(TimestampMixin, Base):
    """A landlord's rental listing."""

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    property_type: Mapped[PropertyType] = mapped_column(
        value_enum(PropertyType), nullable=False, default=PropertyType.APARTMENT
    )
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    latitude: Mapped[float | None] = mapped_column(
        Numeric(10, 7, asdecimal=False), nullable=True
    )
    longitude: Mapped[float | None] = mapped_column(
        Numeric(10, 7, asdecimal=False), nullable=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    size_sqm: Mapped[float | None] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    amenities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    pet_policy: Mapped[str | None] = mapped_column(String(255), nullable=True)
    utilities_included: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_available: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Approval workflow
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        value_enum(ApprovalStatus),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    approval_requested_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    landlord: Mapped["User"] = relationship("User", lazy="raise")

    __table_args__ = (
        Index("ix_properties_landlord", "landlord_id"),
        Index("ix_properties_city", "city"),
        Index("ix_properties_available", "is_available"),
        Index("ix_properties_approval", "approval_status"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title}, status={self.approval_status})>"


class SavedProperty(Base):
    """A property a user marked as favourite."""

    __tablename__ = "saved_properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    property: Mapped["Property"] = relationship("Property", lazy="raise")

    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_saved_user_property"),
    )


class RecentlyViewed(Base):
    """Last time a user opened a property page."""

    __tablename__ = "recently_viewed"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    viewed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    property: Mapped["Property"] = relationship("Property", lazy="raise")

    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_recent_user_property"),
        Index("ix_recently_viewed_user_time", "user_id", "viewed_at"),
    )
