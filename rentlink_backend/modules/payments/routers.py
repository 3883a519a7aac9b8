"""Payment API routes."""

from fastapi import APIRouter

from ...database import DBSession
from ..auth.dependencies import CurrentUser, LandlordUser
from ..commons import BaseResponse
from . import services
from .models import PaymentStatus
from .schemas import (
    GenerateRecurringRequest,
    GenerateRecurringResult,
    LandlordPaymentStats,
    LeasePaymentSummary,
    PaymentRecord,
    PaymentResponse,
    TenantPaymentStats,
)

router = APIRouter(prefix="/payments", tags=["Payments"])


def _payments_response(payments) -> BaseResponse[list[PaymentResponse]]:
    return BaseResponse(
        success=True, data=[PaymentResponse.model_validate(p) for p in payments]
    )


@router.get("/landlord", response_model=BaseResponse[list[PaymentResponse]])
async def list_landlord_payments(
    current_user: LandlordUser, db: DBSession, status: PaymentStatus | None = None
):
    """Get payments on all of the caller's leases."""
    return _payments_response(
        await services.list_for_landlord(db, current_user, status)
    )


@router.get("/landlord/stats", response_model=BaseResponse[LandlordPaymentStats])
async def get_landlord_stats(current_user: LandlordUser, db: DBSession):
    return BaseResponse(success=True, data=await services.landlord_stats(db, current_user))


@router.get("/tenant", response_model=BaseResponse[list[PaymentResponse]])
async def list_tenant_payments(
    current_user: CurrentUser, db: DBSession, status: PaymentStatus | None = None
):
    """Get payments on leases where the caller is the tenant."""
    return _payments_response(await services.list_for_tenant(db, current_user, status))


@router.get("/tenant/stats", response_model=BaseResponse[TenantPaymentStats])
async def get_tenant_stats(current_user: CurrentUser, db: DBSession):
    return BaseResponse(success=True, data=await services.tenant_stats(db, current_user))


@router.get("/leases/{lease_id}", response_model=BaseResponse[list[PaymentResponse]])
async def list_lease_payments(
    lease_id: int,
    current_user: CurrentUser,
    db: DBSession,
    status: PaymentStatus | None = None,
):
    return _payments_response(
        await services.list_for_lease(db, current_user, lease_id, status)
    )


@router.get(
    "/leases/{lease_id}/summary", response_model=BaseResponse[LeasePaymentSummary]
)
async def get_lease_payment_summary(
    lease_id: int, current_user: CurrentUser, db: DBSession
):
    """Get paid, pending and overdue totals for a lease."""
    summary = await services.lease_summary(db, current_user, lease_id)
    return BaseResponse(success=True, data=summary)


@router.post(
    "/leases/{lease_id}/generate", response_model=BaseResponse[GenerateRecurringResult]
)
async def generate_lease_payments(
    lease_id: int,
    data: GenerateRecurringRequest,
    current_user: LandlordUser,
    db: DBSession,
):
    """Extend the monthly rent schedule of a lease."""
    created = await services.generate_for_lease(
        db, current_user, lease_id, data.months_ahead
    )
    return BaseResponse(
        success=True,
        message=f"{created} payment(s) generated",
        data=GenerateRecurringResult(created=created),
    )


@router.post("/{payment_id}/record", response_model=BaseResponse[PaymentResponse])
async def record_payment(
    payment_id: int, data: PaymentRecord, current_user: LandlordUser, db: DBSession
):
    """Mark a payment as received."""
    payment = await services.record_payment(
        db, current_user, payment_id, data.payment_method, data.paid_at, data.notes
    )
    return BaseResponse(
        success=True,
        message="Payment recorded",
        data=PaymentResponse.model_validate(payment),
    )
