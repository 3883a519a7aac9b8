"""Inquiry and message models."""

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...core.database_types import value_enum
from ...database import Base, TimestampMixin
from ..auth.models import User
from ..listings.models import Property


class InquiryStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class Inquiry(TimestampMixin, Base):
    """Conversation between a prospective tenant and a landlord about a property."""

    __tablename__ = "inquiries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id"), nullable=False
    )
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[InquiryStatus] = mapped_column(
        value_enum(InquiryStatus), nullable=False, default=InquiryStatus.PENDING
    )
    move_in_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    property: Mapped["Property"] = relationship("Property", lazy="raise")
    tenant: Mapped["User"] = relationship(
        "User", foreign_keys=[tenant_id], lazy="raise"
    )
    landlord: Mapped["User"] = relationship(
        "User", foreign_keys=[landlord_id], lazy="raise"
    )

    __table_args__ = (
        Index("ix_inquiries_property", "property_id"),
        Index("ix_inquiries_tenant", "tenant_id"),
        Index("ix_inquiries_landlord", "landlord_id"),
    )

    def other_party_id(self, user_id: int) -> int:
        return self.tenant_id if user_id == self.landlord_id else self.landlord_id

    def __repr__(self) -> str:
        return f"<Inquiry(id={self.id}, property_id={self.property_id}, status={self.status})>"


class Message(Base):
    """A chat message within an inquiry."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inquiry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inquiries.id", ondelete="CASCADE"), nullable=False
    )
    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    __table_args__ = (
        Index("ix_messages_inquiry", "inquiry_id", "created_at"),
        Index("ix_messages_sender", "sender_id"),
    )
