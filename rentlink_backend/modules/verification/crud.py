"""CRUD operations for landlord verification requests."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..listings.models import ApprovalStatus
from .models import VerificationRequest


async def get_request_by_id(
    db: AsyncSession, request_id: int
) -> VerificationRequest | None:
    """Get a request with its applicant loaded."""
    result = await db.execute(
        select(VerificationRequest)
        .options(selectinload(VerificationRequest.user))
        .where(VerificationRequest.id == request_id)
    )
    return result.scalar_one_or_none()


async def get_pending_for_user(
    db: AsyncSession, user_id: int
) -> VerificationRequest | None:
    result = await db.execute(
        select(VerificationRequest)
        .where(
            VerificationRequest.user_id == user_id,
            VerificationRequest.status == ApprovalStatus.PENDING,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_latest_for_user(
    db: AsyncSession, user_id: int
) -> VerificationRequest | None:
    result = await db.execute(
        select(VerificationRequest)
        .where(VerificationRequest.user_id == user_id)
        .order_by(
            VerificationRequest.submitted_at.desc(), VerificationRequest.id.desc()
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_requests(
    db: AsyncSession,
    status: ApprovalStatus | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[VerificationRequest], int]:
    """Admin queue, oldest submission first.

    Returns:
        Tuple of (list of requests, total count)
    """
    filters = []
    if status:
        filters.append(VerificationRequest.status == status)

    total = (
        await db.execute(select(func.count(VerificationRequest.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(VerificationRequest)
        .options(selectinload(VerificationRequest.user))
        .where(*filters)
        .order_by(VerificationRequest.submitted_at.asc(), VerificationRequest.id.asc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def count_by_status(db: AsyncSession) -> dict[ApprovalStatus, int]:
    result = await db.execute(
        select(VerificationRequest.status, func.count(VerificationRequest.id)).group_by(
            VerificationRequest.status
        )
    )
    return {status: count for status, count in result.all()}


async def create_request(db: AsyncSession, **kwargs) -> VerificationRequest:
    """Create a new verification request."""
    request = VerificationRequest(**kwargs)
    db.add(request)
    await db.flush()
    await db.refresh(request)
    return request


async def update_request(
    db: AsyncSession, request: VerificationRequest, **kwargs
) -> VerificationRequest:
    for key, value in kwargs.items():
        if hasattr(request, key):
            setattr(request, key, value)
    await db.flush()
    await db.refresh(request)
    return request
