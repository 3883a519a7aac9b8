"""Landlord verification workflow.

A tenant submits ID documents, an admin approves or rejects. Approval is the
only path that grants the landlord role, and it lands in the same commit as
the request status change and its audit entry.
"""

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    AlreadyInStateError,
    BusinessLogicError,
    DuplicatePendingRequestError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.storage import VERIFICATION_PREFIX, StorageService
from ...core.uploads import DOCUMENT_TYPES, validate_upload
from ...core.utils import timestamp_ms, utc_now
from ..audit import crud as audit_crud
from ..audit import record_audit
from ..auth.models import UserRole
from ..auth.schemas import AuthenticatedUser, UserSummary
from ..auth.services import promote_to_landlord
from ..commons import StatusCounts
from ..listings.models import ApprovalStatus
from . import crud
from .models import VerificationRequest
from .schemas import VerificationDetail, VerificationResponse, VerificationSubmit

logger = get_logger(__name__)


def _require_admin(actor: AuthenticatedUser) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError("review", "landlord verification requests")


async def _check_can_apply(db: AsyncSession, actor: AuthenticatedUser) -> None:
    if actor.role == UserRole.LANDLORD:
        raise BusinessLogicError("You are already a verified landlord")
    if await crud.get_pending_for_user(db, actor.id):
        raise DuplicatePendingRequestError()


async def _store_id_documents(
    storage: StorageService,
    user_id: int,
    id_front: UploadFile | None,
    id_back: UploadFile | None,
) -> tuple[str, str]:
    """Validate both ID images, then upload them. Returns the two keys."""
    max_size = settings.verification_max_upload_size_mb
    front = await validate_upload(id_front, DOCUMENT_TYPES, max_size, field="id_front")
    back = await validate_upload(id_back, DOCUMENT_TYPES, max_size, field="id_back")

    timestamp = timestamp_ms()
    front_key = await storage.upload(
        f"{VERIFICATION_PREFIX}/{user_id}/{timestamp}_front_{front.filename}",
        front.content,
        front.content_type,
    )
    back_key = await storage.upload(
        f"{VERIFICATION_PREFIX}/{user_id}/{timestamp}_back_{back.filename}",
        back.content,
        back.content_type,
    )
    return front_key, back_key


async def submit_request(
    db: AsyncSession,
    storage: StorageService,
    actor: AuthenticatedUser,
    data: VerificationSubmit,
    id_front: UploadFile | None,
    id_back: UploadFile | None,
) -> VerificationRequest:
    """Apply to become a landlord.

    Raises:
        BusinessLogicError: If the caller is already a landlord
        DuplicatePendingRequestError: If a request is already pending
        ValidationError: If either ID file is missing, too large or of a
            disallowed type
    """
    await _check_can_apply(db, actor)
    front_key, back_key = await _store_id_documents(storage, actor.id, id_front, id_back)

    request = await crud.create_request(
        db,
        user_id=actor.id,
        status=ApprovalStatus.PENDING,
        **data.model_dump(),
        id_front_key=front_key,
        id_back_key=back_key,
        submitted_at=utc_now(),
        is_resubmission=False,
    )
    await db.commit()

    logger.info(
        "Verification request submitted",
        extra={"request_id": request.id, "user_id": actor.id},
    )
    return request


async def resubmit_request(
    db: AsyncSession,
    storage: StorageService,
    actor: AuthenticatedUser,
    previous_request_id: int,
    data: VerificationSubmit,
    id_front: UploadFile | None,
    id_back: UploadFile | None,
) -> VerificationRequest:
    """Apply again after a rejection, linking to the rejected request.

    Raises:
        NotFoundError: If the previous request is not the caller's
        BusinessLogicError: If the previous request was not rejected
    """
    previous = await crud.get_request_by_id(db, previous_request_id)
    if not previous or previous.user_id != actor.id:
        raise NotFoundError("Previous request not found")
    if previous.status != ApprovalStatus.REJECTED:
        raise BusinessLogicError("Can only resubmit rejected requests")

    await _check_can_apply(db, actor)
    front_key, back_key = await _store_id_documents(storage, actor.id, id_front, id_back)

    request = await crud.create_request(
        db,
        user_id=actor.id,
        status=ApprovalStatus.PENDING,
        **data.model_dump(),
        id_front_key=front_key,
        id_back_key=back_key,
        submitted_at=utc_now(),
        previous_request_id=previous.id,
        is_resubmission=True,
    )
    await db.commit()

    logger.info(
        "Verification request resubmitted",
        extra={"request_id": request.id, "previous_request_id": previous.id},
    )
    return request


async def get_status(
    db: AsyncSession, actor: AuthenticatedUser
) -> VerificationRequest | None:
    """The caller's most recent request, if any."""
    return await crud.get_latest_for_user(db, actor.id)


async def _get_pending_request(db: AsyncSession, request_id: int) -> VerificationRequest:
    request = await crud.get_request_by_id(db, request_id)
    if not request:
        raise NotFoundError(f"Verification request with ID {request_id} not found")
    if request.status != ApprovalStatus.PENDING:
        raise AlreadyInStateError(f"Request is already {request.status.value}")
    return request


async def approve_request(
    db: AsyncSession,
    admin: AuthenticatedUser,
    request_id: int,
    notes: str | None = None,
) -> VerificationRequest:
    """Approve a pending request and make the applicant a landlord."""
    _require_admin(admin)
    request = await _get_pending_request(db, request_id)

    updated = await crud.update_request(
        db,
        request,
        status=ApprovalStatus.APPROVED,
        admin_notes=(notes or "").strip() or None,
        reviewed_at=utc_now(),
        reviewed_by=admin.id,
    )
    await promote_to_landlord(db, request.user_id)
    await record_audit(
        db,
        admin.id,
        audit_crud.APPROVE_LANDLORD,
        "landlord_request",
        request_id,
        {"user_id": request.user_id},
    )
    await db.commit()

    logger.info(
        "Verification request approved",
        extra={"request_id": request_id, "user_id": request.user_id},
    )
    return updated


async def reject_request(
    db: AsyncSession, admin: AuthenticatedUser, request_id: int, reason: str
) -> VerificationRequest:
    _require_admin(admin)
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A reason is required to reject a request", field="reason")

    request = await _get_pending_request(db, request_id)
    updated = await crud.update_request(
        db,
        request,
        status=ApprovalStatus.REJECTED,
        admin_notes=reason,
        reviewed_at=utc_now(),
        reviewed_by=admin.id,
    )
    await record_audit(
        db,
        admin.id,
        audit_crud.REJECT_LANDLORD,
        "landlord_request",
        request_id,
        {"user_id": request.user_id, "reason": reason},
    )
    await db.commit()

    logger.info("Verification request rejected", extra={"request_id": request_id})
    return updated


# ----- Admin reads -----


async def list_requests(
    db: AsyncSession,
    admin: AuthenticatedUser,
    status: ApprovalStatus | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[VerificationRequest], int]:
    _require_admin(admin)
    return await crud.get_requests(db, status, skip=skip, limit=limit)


async def request_stats(db: AsyncSession, admin: AuthenticatedUser) -> StatusCounts:
    _require_admin(admin)
    counts = await crud.count_by_status(db)
    return StatusCounts(
        total=sum(counts.values()),
        pending=counts.get(ApprovalStatus.PENDING, 0),
        approved=counts.get(ApprovalStatus.APPROVED, 0),
        rejected=counts.get(ApprovalStatus.REJECTED, 0),
    )


async def get_request_detail(
    db: AsyncSession,
    storage: StorageService,
    admin: AuthenticatedUser,
    request_id: int,
) -> VerificationDetail:
    """Request with applicant, signed document links and earlier attempts."""
    _require_admin(admin)
    request = await crud.get_request_by_id(db, request_id)
    if not request:
        raise NotFoundError(f"Verification request with ID {request_id} not found")

    history = []
    previous_id = request.previous_request_id
    seen = {request.id}
    while previous_id and previous_id not in seen:
        previous = await crud.get_request_by_id(db, previous_id)
        if not previous:
            break
        history.append(VerificationResponse.model_validate(previous))
        seen.add(previous.id)
        previous_id = previous.previous_request_id

    expiry = settings.signed_url_expiry_seconds
    return VerificationDetail(
        request=VerificationResponse.model_validate(request),
        user=UserSummary.model_validate(request.user),
        id_front_url=await storage.signed_url(request.id_front_key, expires_in=expiry),
        id_back_url=await storage.signed_url(request.id_back_key, expires_in=expiry),
        history=history,
    )
