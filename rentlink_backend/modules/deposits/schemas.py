"""Deposit schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from ..commons import ORMModel
from .models import DepositPaymentMethod, DepositStatus


class DepositResponse(ORMModel):
    """Schema for deposit response."""

    id: int
    lease_id: int
    tenant_id: int
    landlord_id: int
    amount: Decimal
    status: DepositStatus
    paid_at: datetime | None = None
    payment_method: DepositPaymentMethod | None = None
    payment_reference: str | None = None
    release_requested_at: datetime | None = None
    release_requested_by: int | None = None
    release_reason: str | None = None
    deduction_amount: Decimal
    deduction_reason: str | None = None
    released_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class DepositCreate(BaseModel):
    amount: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)


class DepositConfirm(BaseModel):
    """Landlord confirms the deposit was received."""

    payment_method: DepositPaymentMethod
    payment_reference: str | None = Field(None, max_length=255)
    paid_at: datetime | None = None


class DepositReleaseRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class DepositRelease(BaseModel):
    deduction_amount: Decimal = Field(Decimal("0"), max_digits=12, decimal_places=2)
    deduction_reason: str | None = Field(None, max_length=2000)


class DepositForfeit(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class DepositReleaseResult(BaseModel):
    """Outcome of a release: what goes back to the tenant and what is kept."""

    deposit: DepositResponse
    released_amount: Decimal
    deducted_amount: Decimal
