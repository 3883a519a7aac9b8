"""Payment schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from ..commons import ORMModel
from .models import PaymentStatus, PaymentType


class PaymentResponse(ORMModel):
    """Schema for payment response."""

    id: int
    lease_id: int
    amount: Decimal
    type: PaymentType
    status: PaymentStatus
    due_date: date
    paid_at: datetime | None = None
    payment_method: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class PaymentRecord(BaseModel):
    """Schema for recording a received payment."""

    payment_method: str = Field(..., min_length=1, max_length=50)
    paid_at: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class GenerateRecurringRequest(BaseModel):
    months_ahead: int = Field(12, ge=1, le=60)


class GenerateRecurringResult(BaseModel):
    created: int


class LeasePaymentSummary(BaseModel):
    """Totals per status for one lease."""

    paid: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    overdue: Decimal = Decimal("0")


class LandlordPaymentStats(BaseModel):
    total_collected: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    overdue: Decimal = Decimal("0")


class TenantPaymentStats(BaseModel):
    total_paid: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    overdue: Decimal = Decimal("0")
