"""CRUD operations for the payment ledger."""

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..leases.models import Lease
from .models import Payment, PaymentStatus, PaymentType


async def get_payment_by_id(db: AsyncSession, payment_id: int) -> Payment | None:
    """Get a payment with its lease loaded."""
    result = await db.execute(
        select(Payment)
        .options(selectinload(Payment.lease))
        .where(Payment.id == payment_id)
    )
    return result.scalar_one_or_none()


async def get_payments_by_lease(
    db: AsyncSession, lease_id: int, status: PaymentStatus | None = None
) -> list[Payment]:
    """Payments of a lease, earliest due first."""
    query = select(Payment).where(Payment.lease_id == lease_id)
    if status:
        query = query.where(Payment.status == status)
    result = await db.execute(query.order_by(Payment.due_date.asc(), Payment.id.asc()))
    return list(result.scalars().all())


async def get_due_dates(
    db: AsyncSession, lease_id: int, payment_type: PaymentType
) -> set[date]:
    result = await db.execute(
        select(Payment.due_date).where(
            Payment.lease_id == lease_id, Payment.type == payment_type
        )
    )
    return set(result.scalars().all())


async def _get_payments_by_party(
    db: AsyncSession, party_column, user_id: int, status: PaymentStatus | None
) -> list[Payment]:
    query = (
        select(Payment)
        .join(Lease, Lease.id == Payment.lease_id)
        .where(party_column == user_id)
    )
    if status:
        query = query.where(Payment.status == status)
    result = await db.execute(query.order_by(Payment.due_date.desc(), Payment.id.desc()))
    return list(result.scalars().all())


async def get_payments_for_landlord(
    db: AsyncSession, landlord_id: int, status: PaymentStatus | None = None
) -> list[Payment]:
    """Payments on all leases of a landlord, latest due first."""
    return await _get_payments_by_party(db, Lease.landlord_id, landlord_id, status)


async def get_payments_for_tenant(
    db: AsyncSession, tenant_id: int, status: PaymentStatus | None = None
) -> list[Payment]:
    return await _get_payments_by_party(db, Lease.tenant_id, tenant_id, status)


async def sum_by_status(
    db: AsyncSession,
    lease_id: int | None = None,
    landlord_id: int | None = None,
    tenant_id: int | None = None,
) -> dict[PaymentStatus, Decimal]:
    """Total amount per payment status, scoped to a lease or a party."""
    query = select(Payment.status, func.coalesce(func.sum(Payment.amount), 0)).join(
        Lease, Lease.id == Payment.lease_id
    )
    if lease_id is not None:
        query = query.where(Payment.lease_id == lease_id)
    if landlord_id is not None:
        query = query.where(Lease.landlord_id == landlord_id)
    if tenant_id is not None:
        query = query.where(Lease.tenant_id == tenant_id)

    result = await db.execute(query.group_by(Payment.status))
    return {status: Decimal(str(total)) for status, total in result.all()}


async def create_payment(db: AsyncSession, **kwargs) -> Payment:
    """Create a new payment."""
    payment = Payment(**kwargs)
    db.add(payment)
    await db.flush()
    return payment


async def create_payments(db: AsyncSession, payments: list[dict]) -> int:
    db.add_all([Payment(**values) for values in payments])
    await db.flush()
    return len(payments)


async def update_payment(db: AsyncSession, payment: Payment, **kwargs) -> Payment:
    """Update payment fields."""
    for key, value in kwargs.items():
        if hasattr(payment, key):
            setattr(payment, key, value)
    await db.flush()
    await db.refresh(payment)
    return payment


async def mark_overdue(db: AsyncSession, today: date) -> int:
    """Flag pending payments due before ``today`` as overdue."""
    result = await db.execute(
        update(Payment)
        .where(Payment.status == PaymentStatus.PENDING, Payment.due_date < today)
        .values(status=PaymentStatus.OVERDUE)
        .execution_options(synchronize_session="fetch")
    )
    await db.flush()
    return result.rowcount or 0
