"""Security deposit escrow models."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...core.database_types import value_enum
from ...database import Base, TimestampMixin
from ..leases.models import Lease


class DepositStatus(str, enum.Enum):
    PENDING = "pending"
    HELD = "held"
    RELEASED = "released"
    FORFEITED = "forfeited"
    PARTIAL_RELEASE = "partial_release"


class DepositPaymentMethod(str, enum.Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    EFT = "eft"


TERMINAL_DEPOSIT_STATUSES = frozenset(
    {DepositStatus.RELEASED, DepositStatus.FORFEITED, DepositStatus.PARTIAL_RELEASE}
)


class Deposit(TimestampMixin, Base):
    """Deposit held by the landlord for the duration of a lease."""

    __tablename__ = "deposits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lease_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("leases.id"), nullable=False, unique=True
    )
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[DepositStatus] = mapped_column(
        value_enum(DepositStatus), nullable=False, default=DepositStatus.PENDING
    )

    # Payment
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_method: Mapped[DepositPaymentMethod | None] = mapped_column(
        value_enum(DepositPaymentMethod), nullable=True
    )
    payment_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Release
    release_requested_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    release_requested_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    release_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    deduction_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    deduction_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    released_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    lease: Mapped["Lease"] = relationship("Lease", lazy="raise")

    __table_args__ = (
        Index("ix_deposits_tenant", "tenant_id"),
        Index("ix_deposits_landlord", "landlord_id"),
        Index("ix_deposits_status", "status"),
    )

    @property
    def released_amount(self) -> Decimal:
        return (self.amount or Decimal("0")) - (self.deduction_amount or Decimal("0"))

    def __repr__(self) -> str:
        return f"<Deposit(id={self.id}, lease_id={self.lease_id}, status={self.status})>"
