"""Lease lookups scoped to the caller."""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError
from ..auth.schemas import AuthenticatedUser
from . import crud
from .models import Lease


async def get_lease_for_landlord(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int
) -> Lease:
    """Fetch a lease the caller is the landlord of.

    Raises:
        NotFoundError: If the lease does not exist or belongs to someone else
    """
    lease = await crud.get_lease_by_id(db, lease_id)
    if not lease or lease.landlord_id != actor.id:
        raise NotFoundError("Lease not found or unauthorized")
    return lease


async def get_lease_for_tenant(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int
) -> Lease:
    lease = await crud.get_lease_by_id(db, lease_id)
    if not lease or lease.tenant_id != actor.id:
        raise NotFoundError("Lease not found or unauthorized")
    return lease


async def get_lease_for_party(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int
) -> Lease:
    """Fetch a lease visible to its landlord, its tenant or an admin."""
    lease = await crud.get_lease_by_id(db, lease_id)
    if not lease or not (
        actor.is_admin or actor.id in (lease.landlord_id, lease.tenant_id)
    ):
        raise NotFoundError("Lease not found or unauthorized")
    return lease
