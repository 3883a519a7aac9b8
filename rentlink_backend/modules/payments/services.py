"""Payment ledger business logic: schedules, overdue sweep and recording."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import AlreadyInStateError, NotFoundError
from ...core.logging import get_logger
from ...core.utils import utc_now, utc_today
from ..auth.schemas import AuthenticatedUser
from ..leases import crud as lease_crud
from ..leases.access import get_lease_for_landlord, get_lease_for_party
from ..leases.models import Lease
from . import crud
from .models import Payment, PaymentStatus, PaymentType
from .schemas import LandlordPaymentStats, LeasePaymentSummary, TenantPaymentStats

logger = get_logger(__name__)


def first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def recurring_due_dates(start_date: date, end_date: date, months_ahead: int) -> list[date]:
    """Due dates on the 1st of each month after ``start_date``.

    Stops before reaching ``end_date`` or after ``months_ahead`` dates.
    """
    due_dates = []
    current = first_of_next_month(start_date)
    while len(due_dates) < months_ahead and current < end_date:
        due_dates.append(current)
        current = first_of_next_month(current)
    return due_dates


async def create_first_rent_payment(db: AsyncSession, lease: Lease) -> Payment:
    """First month's rent, due on the lease start date."""
    return await crud.create_payment(
        db,
        lease_id=lease.id,
        amount=lease.monthly_rent,
        type=PaymentType.RENT,
        status=PaymentStatus.PENDING,
        due_date=lease.start_date,
    )


async def generate_recurring_payments(
    db: AsyncSession, lease_id: int, months_ahead: int = 12
) -> int:
    """Create pending monthly rent payments for a lease.

    Dates that already have a rent payment are skipped, so calling this
    again creates nothing new. Only flushes; the caller commits.

    Returns:
        Number of payments created

    Raises:
        NotFoundError: If the lease does not exist
    """
    lease = await lease_crud.get_lease_by_id(db, lease_id)
    if not lease:
        raise NotFoundError(f"Lease with ID {lease_id} not found")

    existing = await crud.get_due_dates(db, lease_id, PaymentType.RENT)
    new_payments = [
        {
            "lease_id": lease_id,
            "amount": lease.monthly_rent,
            "type": PaymentType.RENT,
            "status": PaymentStatus.PENDING,
            "due_date": due_date,
        }
        for due_date in recurring_due_dates(lease.start_date, lease.end_date, months_ahead)
        if due_date not in existing
    ]
    if not new_payments:
        return 0

    created = await crud.create_payments(db, new_payments)
    logger.info(
        "Recurring payments generated", extra={"lease_id": lease_id, "count": created}
    )
    return created


async def generate_for_lease(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int, months_ahead: int = 12
) -> int:
    """Landlord-triggered schedule extension for one of their leases."""
    await get_lease_for_landlord(db, actor, lease_id)
    created = await generate_recurring_payments(db, lease_id, months_ahead)
    await db.commit()
    return created


async def mark_overdue_payments(db: AsyncSession, today: date | None = None) -> int:
    """Move pending payments due before today to overdue.

    Returns:
        Number of payments updated
    """
    updated = await crud.mark_overdue(db, today or utc_today())
    await db.commit()

    if updated:
        logger.info("Payments marked overdue", extra={"count": updated})
    return updated


async def record_payment(
    db: AsyncSession,
    actor: AuthenticatedUser,
    payment_id: int,
    method: str,
    paid_at: datetime | None = None,
    notes: str | None = None,
) -> Payment:
    """Mark a payment as received.

    Raises:
        NotFoundError: If the payment does not exist or its lease is not the
            caller's
        AlreadyInStateError: If the payment is already paid
    """
    payment = await crud.get_payment_by_id(db, payment_id)
    if not payment or payment.lease.landlord_id != actor.id:
        raise NotFoundError("Payment not found or unauthorized")

    if payment.status == PaymentStatus.PAID:
        raise AlreadyInStateError("Payment is already paid")

    updated = await crud.update_payment(
        db,
        payment,
        status=PaymentStatus.PAID,
        paid_at=paid_at or utc_now(),
        payment_method=method,
        notes=notes,
    )
    await db.commit()

    logger.info(
        "Payment recorded",
        extra={"payment_id": payment_id, "lease_id": payment.lease_id},
    )
    return updated


# ----- Reads -----


async def list_for_lease(
    db: AsyncSession,
    actor: AuthenticatedUser,
    lease_id: int,
    status: PaymentStatus | None = None,
) -> list[Payment]:
    await get_lease_for_party(db, actor, lease_id)
    return await crud.get_payments_by_lease(db, lease_id, status)


async def list_for_landlord(
    db: AsyncSession, actor: AuthenticatedUser, status: PaymentStatus | None = None
) -> list[Payment]:
    return await crud.get_payments_for_landlord(db, actor.id, status)


async def list_for_tenant(
    db: AsyncSession, actor: AuthenticatedUser, status: PaymentStatus | None = None
) -> list[Payment]:
    return await crud.get_payments_for_tenant(db, actor.id, status)


async def lease_summary(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int
) -> LeasePaymentSummary:
    await get_lease_for_party(db, actor, lease_id)
    totals = await crud.sum_by_status(db, lease_id=lease_id)
    return LeasePaymentSummary(
        paid=totals.get(PaymentStatus.PAID, Decimal("0")),
        pending=totals.get(PaymentStatus.PENDING, Decimal("0")),
        overdue=totals.get(PaymentStatus.OVERDUE, Decimal("0")),
    )


async def landlord_stats(
    db: AsyncSession, actor: AuthenticatedUser
) -> LandlordPaymentStats:
    totals = await crud.sum_by_status(db, landlord_id=actor.id)
    return LandlordPaymentStats(
        total_collected=totals.get(PaymentStatus.PAID, Decimal("0")),
        pending=totals.get(PaymentStatus.PENDING, Decimal("0")),
        overdue=totals.get(PaymentStatus.OVERDUE, Decimal("0")),
    )


async def tenant_stats(db: AsyncSession, actor: AuthenticatedUser) -> TenantPaymentStats:
    totals = await crud.sum_by_status(db, tenant_id=actor.id)
    return TenantPaymentStats(
        total_paid=totals.get(PaymentStatus.PAID, Decimal("0")),
        pending=totals.get(PaymentStatus.PENDING, Decimal("0")),
        overdue=totals.get(PaymentStatus.OVERDUE, Decimal("0")),
    )
