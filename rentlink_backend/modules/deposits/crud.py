"""CRUD operations for deposits."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Deposit, DepositStatus


async def get_deposit_by_id(db: AsyncSession, deposit_id: int) -> Deposit | None:
    result = await db.execute(select(Deposit).where(Deposit.id == deposit_id))
    return result.scalar_one_or_none()


async def get_deposit_by_lease(db: AsyncSession, lease_id: int) -> Deposit | None:
    result = await db.execute(select(Deposit).where(Deposit.lease_id == lease_id))
    return result.scalar_one_or_none()


async def get_deposits_for_landlord(
    db: AsyncSession, landlord_id: int, status: DepositStatus | None = None
) -> list[Deposit]:
    query = select(Deposit).where(Deposit.landlord_id == landlord_id)
    if status:
        query = query.where(Deposit.status == status)
    result = await db.execute(query.order_by(Deposit.created_at.desc(), Deposit.id.desc()))
    return list(result.scalars().all())


async def get_deposits_for_tenant(
    db: AsyncSession, tenant_id: int, status: DepositStatus | None = None
) -> list[Deposit]:
    query = select(Deposit).where(Deposit.tenant_id == tenant_id)
    if status:
        query = query.where(Deposit.status == status)
    result = await db.execute(query.order_by(Deposit.created_at.desc(), Deposit.id.desc()))
    return list(result.scalars().all())


async def create_deposit(db: AsyncSession, **kwargs) -> Deposit:
    """Create a new deposit record."""
    deposit = Deposit(**kwargs)
    db.add(deposit)
    await db.flush()
    await db.refresh(deposit)
    return deposit


async def update_deposit(db: AsyncSession, deposit: Deposit, **kwargs) -> Deposit:
    """Update deposit fields."""
    for key, value in kwargs.items():
        if hasattr(deposit, key):
            setattr(deposit, key, value)
    await db.flush()
    await db.refresh(deposit)
    return deposit
