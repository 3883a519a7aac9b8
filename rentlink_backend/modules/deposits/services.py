"""Deposit escrow business logic.

A deposit moves ``pending -> held`` when the landlord confirms receipt, and
from ``held`` to exactly one of ``released``, ``partial_release`` or
``forfeited``. Those three are final.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    BusinessLogicError,
    DepositAlreadyExistsError,
    NotFoundError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.utils import utc_now
from ..auth.schemas import AuthenticatedUser
from ..leases.access import get_lease_for_landlord, get_lease_for_party
from ..leases.models import Lease
from . import crud
from .models import Deposit, DepositPaymentMethod, DepositStatus

logger = get_logger(__name__)


async def _get_deposit_for_landlord(
    db: AsyncSession, actor: AuthenticatedUser, deposit_id: int
) -> Deposit:
    deposit = await crud.get_deposit_by_id(db, deposit_id)
    if not deposit or deposit.landlord_id != actor.id:
        raise NotFoundError("Deposit not found or unauthorized")
    return deposit


def _require_held(deposit: Deposit) -> None:
    if deposit.status != DepositStatus.HELD:
        raise BusinessLogicError("Deposit is not currently held")


async def create_deposit(
    db: AsyncSession, lease: Lease, amount: Decimal | None = None
) -> Deposit:
    """Open the escrow record for a lease. Only flushes; the caller commits.

    Raises:
        DepositAlreadyExistsError: If the lease already has a deposit
    """
    if await crud.get_deposit_by_lease(db, lease.id):
        raise DepositAlreadyExistsError(lease.id)

    deposit = await crud.create_deposit(
        db,
        lease_id=lease.id,
        tenant_id=lease.tenant_id,
        landlord_id=lease.landlord_id,
        amount=amount if amount is not None else lease.deposit,
        status=DepositStatus.PENDING,
        deduction_amount=Decimal("0"),
    )
    logger.info(
        "Deposit created", extra={"deposit_id": deposit.id, "lease_id": lease.id}
    )
    return deposit


async def create_for_lease(
    db: AsyncSession,
    actor: AuthenticatedUser,
    lease_id: int,
    amount: Decimal | None = None,
) -> Deposit:
    lease = await get_lease_for_landlord(db, actor, lease_id)
    deposit = await create_deposit(db, lease, amount)
    await db.commit()
    return deposit


async def confirm_deposit(
    db: AsyncSession,
    actor: AuthenticatedUser,
    deposit_id: int,
    method: DepositPaymentMethod,
    reference: str | None = None,
    paid_at: datetime | None = None,
) -> Deposit:
    """Record that the landlord received the deposit.

    Raises:
        BusinessLogicError: If the deposit is not pending
    """
    deposit = await _get_deposit_for_landlord(db, actor, deposit_id)
    if deposit.status != DepositStatus.PENDING:
        raise BusinessLogicError("Deposit is not pending")

    updated = await crud.update_deposit(
        db,
        deposit,
        status=DepositStatus.HELD,
        payment_method=method,
        payment_reference=reference,
        paid_at=paid_at or utc_now(),
    )
    await db.commit()

    logger.info("Deposit confirmed", extra={"deposit_id": deposit_id})
    return updated


async def request_release(
    db: AsyncSession, actor: AuthenticatedUser, deposit_id: int, reason: str
) -> Deposit:
    """Ask for a held deposit to be released. Either party may ask."""
    deposit = await crud.get_deposit_by_id(db, deposit_id)
    if not deposit or actor.id not in (deposit.landlord_id, deposit.tenant_id):
        raise NotFoundError("Deposit not found or unauthorized")
    _require_held(deposit)

    updated = await crud.update_deposit(
        db,
        deposit,
        release_requested_at=utc_now(),
        release_requested_by=actor.id,
        release_reason=reason,
    )
    await db.commit()

    logger.info(
        "Deposit release requested",
        extra={"deposit_id": deposit_id, "requested_by": actor.id},
    )
    return updated


async def release_deposit(
    db: AsyncSession,
    actor: AuthenticatedUser,
    deposit_id: int,
    deduction_amount: Decimal = Decimal("0"),
    reason: str | None = None,
) -> tuple[Deposit, Decimal, Decimal]:
    """Release a held deposit, optionally keeping part of it.

    Returns:
        Tuple of (deposit, released amount, deducted amount)

    Raises:
        BusinessLogicError: If the deposit is not held
        ValidationError: If the deduction is negative, exceeds the deposit, or
            has no reason
    """
    deposit = await _get_deposit_for_landlord(db, actor, deposit_id)
    _require_held(deposit)

    deduction = Decimal(deduction_amount or 0)
    if deduction < 0:
        raise ValidationError(
            "Deduction cannot be negative", field="deduction_amount", value=str(deduction)
        )
    if deduction > deposit.amount:
        raise ValidationError(
            "Deduction cannot exceed the deposit amount",
            field="deduction_amount",
            value=str(deduction),
        )
    reason = (reason or "").strip() or None
    if deduction > 0 and not reason:
        raise ValidationError(
            "A reason is required when deducting from a deposit", field="deduction_reason"
        )

    status = DepositStatus.PARTIAL_RELEASE if deduction > 0 else DepositStatus.RELEASED
    updated = await crud.update_deposit(
        db,
        deposit,
        status=status,
        deduction_amount=deduction,
        deduction_reason=reason,
        released_at=utc_now(),
    )
    await db.commit()

    released = updated.amount - deduction
    logger.info(
        "Deposit released",
        extra={
            "deposit_id": deposit_id,
            "status": status.value,
            "deducted": str(deduction),
        },
    )
    return updated, released, deduction


async def forfeit_deposit(
    db: AsyncSession, actor: AuthenticatedUser, deposit_id: int, reason: str
) -> Deposit:
    """Keep the whole deposit.

    Raises:
        ValidationError: If no reason is given
    """
    deposit = await _get_deposit_for_landlord(db, actor, deposit_id)
    _require_held(deposit)

    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A reason is required to forfeit a deposit", field="reason")

    updated = await crud.update_deposit(
        db,
        deposit,
        status=DepositStatus.FORFEITED,
        deduction_amount=deposit.amount,
        deduction_reason=reason,
        released_at=utc_now(),
    )
    await db.commit()

    logger.info("Deposit forfeited", extra={"deposit_id": deposit_id})
    return updated


# ----- Reads -----


async def get_for_lease(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int
) -> Deposit | None:
    await get_lease_for_party(db, actor, lease_id)
    return await crud.get_deposit_by_lease(db, lease_id)


async def list_for_landlord(
    db: AsyncSession, actor: AuthenticatedUser, status: DepositStatus | None = None
) -> list[Deposit]:
    return await crud.get_deposits_for_landlord(db, actor.id, status)


async def list_for_tenant(
    db: AsyncSession, actor: AuthenticatedUser, status: DepositStatus | None = None
) -> list[Deposit]:
    return await crud.get_deposits_for_tenant(db, actor.id, status)
