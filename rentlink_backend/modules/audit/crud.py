"""CRUD operations for the audit trail."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.utils import utc_now
from .models import AuditLog

# Actions recorded by the moderation workflows
APPROVE_LANDLORD = "approve_landlord"
REJECT_LANDLORD = "reject_landlord"
APPROVE_PROPERTY = "approve_property"
REJECT_PROPERTY = "reject_property"
DELETE_PROPERTY = "delete_property"
UPDATE_USER_ROLE = "update_user_role"
TERMINATE_LEASE = "terminate_lease"


async def record_audit(
    db: AsyncSession,
    admin_id: int,
    action: str,
    target_type: str,
    target_id: int | str,
    details: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry to the current transaction."""
    entry = AuditLog(
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id),
        details=details,
        timestamp=utc_now(),
    )
    db.add(entry)
    await db.flush()
    return entry


async def get_audit_logs(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    action: str | None = None,
    target_type: str | None = None,
    target_id: str | None = None,
) -> tuple[list[AuditLog], int]:
    """Get audit entries, newest first.

    Returns:
        Tuple of (list of entries, total count)
    """
    filters = []
    if action:
        filters.append(AuditLog.action == action)
    if target_type:
        filters.append(AuditLog.target_type == target_type)
    if target_id:
        filters.append(AuditLog.target_id == target_id)

    total = (
        await db.execute(select(func.count(AuditLog.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(AuditLog)
        .where(*filters)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total
