"""Payment ledger models."""

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date,
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

from ...core.database_types import value_enum
from ...database import Base, TimestampMixin
from ..leases.models import Lease


class PaymentType(str, enum.Enum):
    RENT = "rent"
    DEPOSIT = "deposit"
    LATE_FEE = "late_fee"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Payment(TimestampMixin, Base):
    """A single amount due on a lease."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lease_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("leases.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    type: Mapped[PaymentType] = mapped_column(
        value_enum(PaymentType), nullable=False, default=PaymentType.RENT
    )
    status: Mapped[PaymentStatus] = mapped_column(
        value_enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lease: Mapped["Lease"] = relationship("Lease", lazy="raise")

    __table_args__ = (
        UniqueConstraint("lease_id", "type", "due_date", name="uq_payment_lease_type_due"),
        Index("ix_payments_status", "status"),
        Index("ix_payments_due_date", "due_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, lease_id={self.lease_id}, "
            f"due_date={self.due_date}, status={self.status})>"
        )
