"""Landlord verification request models."""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...core.database_types import value_enum
from ...database import Base, TimestampMixin
from ..auth.models import User
from ..listings.models import ApprovalStatus


class IdType(str, enum.Enum):
    NATIONAL_ID = "national_id"
    PASSPORT = "passport"
    DRIVERS_LICENSE = "drivers_license"


class VerificationRequest(TimestampMixin, Base):
    """A tenant's application to become a landlord."""

    __tablename__ = "landlord_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    status: Mapped[ApprovalStatus] = mapped_column(
        value_enum(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING
    )

    # Identity documents
    id_type: Mapped[IdType] = mapped_column(value_enum(IdType), nullable=False)
    id_number: Mapped[str] = mapped_column(String(100), nullable=False)
    business_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    business_registration: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    id_front_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    id_back_key: Mapped[str | None] = mapped_column(String(500), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    previous_request_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("landlord_requests.id"), nullable=True
    )
    is_resubmission: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    # Review
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewed_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    user: Mapped["User"] = relationship("User", foreign_keys=[user_id], lazy="raise")

    __table_args__ = (
        Index("ix_landlord_requests_user", "user_id"),
        Index("ix_landlord_requests_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<VerificationRequest(id={self.id}, user_id={self.user_id}, status={self.status})>"
