"""Deposit escrow API routes."""

from fastapi import APIRouter

from ...database import DBSession
from ..auth.dependencies import CurrentUser, LandlordUser
from ..commons import BaseResponse
from . import services
from .models import DepositStatus
from .schemas import (
    DepositConfirm,
    DepositCreate,
    DepositForfeit,
    DepositRelease,
    DepositReleaseRequest,
    DepositReleaseResult,
    DepositResponse,
)

router = APIRouter(prefix="/deposits", tags=["Deposits"])


@router.get("/landlord", response_model=BaseResponse[list[DepositResponse]])
async def list_landlord_deposits(
    current_user: LandlordUser, db: DBSession, status: DepositStatus | None = None
):
    deposits = await services.list_for_landlord(db, current_user, status)
    return BaseResponse(
        success=True, data=[DepositResponse.model_validate(d) for d in deposits]
    )


@router.get("/tenant", response_model=BaseResponse[list[DepositResponse]])
async def list_tenant_deposits(
    current_user: CurrentUser, db: DBSession, status: DepositStatus | None = None
):
    deposits = await services.list_for_tenant(db, current_user, status)
    return BaseResponse(
        success=True, data=[DepositResponse.model_validate(d) for d in deposits]
    )


@router.get("/leases/{lease_id}", response_model=BaseResponse[DepositResponse | None])
async def get_lease_deposit(lease_id: int, current_user: CurrentUser, db: DBSession):
    """Get the deposit of a lease, if it has one."""
    deposit = await services.get_for_lease(db, current_user, lease_id)
    return BaseResponse(
        success=True,
        data=DepositResponse.model_validate(deposit) if deposit else None,
    )


@router.post("/leases/{lease_id}", response_model=BaseResponse[DepositResponse])
async def create_lease_deposit(
    lease_id: int, data: DepositCreate, current_user: LandlordUser, db: DBSession
):
    """Open a deposit for a lease. Defaults to the lease's deposit amount."""
    deposit = await services.create_for_lease(db, current_user, lease_id, data.amount)
    return BaseResponse(
        success=True,
        message="Deposit created",
        data=DepositResponse.model_validate(deposit),
    )


@router.post("/{deposit_id}/confirm", response_model=BaseResponse[DepositResponse])
async def confirm_deposit(
    deposit_id: int, data: DepositConfirm, current_user: LandlordUser, db: DBSession
):
    """Confirm receipt of the deposit. The deposit is then held."""
    deposit = await services.confirm_deposit(
        db,
        current_user,
        deposit_id,
        data.payment_method,
        data.payment_reference,
        data.paid_at,
    )
    return BaseResponse(
        success=True,
        message="Deposit confirmed",
        data=DepositResponse.model_validate(deposit),
    )


@router.post(
    "/{deposit_id}/request-release", response_model=BaseResponse[DepositResponse]
)
async def request_deposit_release(
    deposit_id: int,
    data: DepositReleaseRequest,
    current_user: CurrentUser,
    db: DBSession,
):
    deposit = await services.request_release(db, current_user, deposit_id, data.reason)
    return BaseResponse(
        success=True,
        message="Release requested",
        data=DepositResponse.model_validate(deposit),
    )


@router.post("/{deposit_id}/release", response_model=BaseResponse[DepositReleaseResult])
async def release_deposit(
    deposit_id: int, data: DepositRelease, current_user: LandlordUser, db: DBSession
):
    """Release a held deposit, optionally with a deduction."""
    deposit, released, deducted = await services.release_deposit(
        db, current_user, deposit_id, data.deduction_amount, data.deduction_reason
    )
    return BaseResponse(
        success=True,
        message="Deposit released",
        data=DepositReleaseResult(
            deposit=DepositResponse.model_validate(deposit),
            released_amount=released,
            deducted_amount=deducted,
        ),
    )


@router.post("/{deposit_id}/forfeit", response_model=BaseResponse[DepositResponse])
async def forfeit_deposit(
    deposit_id: int, data: DepositForfeit, current_user: LandlordUser, db: DBSession
):
    deposit = await services.forfeit_deposit(db, current_user, deposit_id, data.reason)
    return BaseResponse(
        success=True,
        message="Deposit forfeited",
        data=DepositResponse.model_validate(deposit),
    )
