"""Admin operations: dashboard stats, user roles, audit trail and sweeps."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import PermissionDeniedError, ValidationError
from ...core.logging import get_logger
from ..audit import crud as audit_crud
from ..audit import record_audit
from ..audit.models import AuditLog
from ..auth import crud as auth_crud
from ..auth import services as auth_services
from ..auth.models import User, UserRole
from ..auth.schemas import AuthenticatedUser
from ..leases import crud as lease_crud
from ..leases import services as lease_services
from ..leases.models import LeaseStatus
from ..listings import crud as listing_crud
from ..messaging import crud as messaging_crud
from ..payments import services as payment_services
from .schemas import PlatformStats, SweepResult

logger = get_logger(__name__)


def _require_admin(actor: AuthenticatedUser) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError("access", "the admin dashboard")


async def platform_stats(db: AsyncSession, admin: AuthenticatedUser) -> PlatformStats:
    _require_admin(admin)
    return PlatformStats(
        users=await auth_crud.count_users(db),
        properties=await listing_crud.count_properties(db),
        approved_leases=await lease_crud.count_leases_by_status(db, LeaseStatus.APPROVED),
        inquiries=await messaging_crud.count_inquiries(db),
    )


async def list_users(
    db: AsyncSession,
    admin: AuthenticatedUser,
    role: UserRole | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[User], int]:
    _require_admin(admin)
    return await auth_crud.get_users(db, skip=skip, limit=limit, role=role, search=search)


async def update_user_role(
    db: AsyncSession, admin: AuthenticatedUser, user_id: int, role: UserRole
) -> User:
    """Change a user's role and record it in the audit log.

    Raises:
        ValidationError: If an admin tries to change their own role
    """
    _require_admin(admin)
    if user_id == admin.id:
        raise ValidationError("You cannot change your own role", field="role")

    user = await auth_crud.get_user_by_id(db, user_id)
    previous = user.role.value if user else None

    updated = await auth_services.update_user_role(db, user_id, role)
    await record_audit(
        db,
        admin.id,
        audit_crud.UPDATE_USER_ROLE,
        "user",
        user_id,
        {"from_role": previous, "to_role": role.value},
    )
    await db.commit()
    return updated


async def list_audit_logs(
    db: AsyncSession,
    admin: AuthenticatedUser,
    action: str | None = None,
    target_type: str | None = None,
    target_id: str | None = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[AuditLog], int]:
    _require_admin(admin)
    return await audit_crud.get_audit_logs(
        db,
        skip=skip,
        limit=limit,
        action=action,
        target_type=target_type,
        target_id=target_id,
    )


async def run_sweeps(db: AsyncSession, today: date | None = None) -> SweepResult:
    """Flag overdue payments and expire finished leases."""
    result = SweepResult(
        overdue_payments=await payment_services.mark_overdue_payments(db, today),
        expired_leases=await lease_services.expire_leases(db, today),
    )
    logger.info(
        "Sweeps completed",
        extra={
            "overdue_payments": result.overdue_payments,
            "expired_leases": result.expired_leases,
        },
    )
    return result
