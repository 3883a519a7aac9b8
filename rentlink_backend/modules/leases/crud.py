"""CRUD operations for leases."""

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import Lease, LeaseStatus


def _with_parties():
    return (
        selectinload(Lease.property),
        selectinload(Lease.tenant),
        selectinload(Lease.landlord),
    )


async def get_lease_by_id(db: AsyncSession, lease_id: int) -> Lease | None:
    """Get a lease with its property, tenant and landlord loaded."""
    result = await db.execute(
        select(Lease).options(*_with_parties()).where(Lease.id == lease_id)
    )
    return result.scalar_one_or_none()


async def get_leases_by_landlord(
    db: AsyncSession, landlord_id: int, status: LeaseStatus | None = None
) -> list[Lease]:
    query = select(Lease).options(*_with_parties()).where(
        Lease.landlord_id == landlord_id
    )
    if status:
        query = query.where(Lease.status == status)
    result = await db.execute(query.order_by(Lease.created_at.desc(), Lease.id.desc()))
    return list(result.scalars().all())


async def get_leases_by_tenant(
    db: AsyncSession, tenant_id: int, status: LeaseStatus | None = None
) -> list[Lease]:
    query = select(Lease).options(*_with_parties()).where(Lease.tenant_id == tenant_id)
    if status:
        query = query.where(Lease.status == status)
    result = await db.execute(query.order_by(Lease.created_at.desc(), Lease.id.desc()))
    return list(result.scalars().all())


async def get_expired_approved_leases(db: AsyncSession, today: date) -> list[Lease]:
    """Approved leases whose end date has passed."""
    result = await db.execute(
        select(Lease).where(
            Lease.status == LeaseStatus.APPROVED, Lease.end_date < today
        )
    )
    return list(result.scalars().all())


async def count_leases_for_property(db: AsyncSession, property_id: int) -> int:
    return (
        await db.execute(
            select(func.count(Lease.id)).where(Lease.property_id == property_id)
        )
    ).scalar_one()


async def count_leases_by_status(db: AsyncSession, status: LeaseStatus) -> int:
    return (
        await db.execute(select(func.count(Lease.id)).where(Lease.status == status))
    ).scalar_one()


async def create_lease(db: AsyncSession, **kwargs) -> Lease:
    """Create a new lease."""
    lease = Lease(**kwargs)
    db.add(lease)
    await db.flush()
    result = await db.execute(
        select(Lease)
        .options(*_with_parties())
        .where(Lease.id == lease.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def update_lease(db: AsyncSession, lease: Lease, **kwargs) -> Lease:
    """Update lease fields."""
    for key, value in kwargs.items():
        if hasattr(lease, key):
            setattr(lease, key, value)
    await db.flush()
    await db.refresh(lease)
    return lease
