"""Lease lifecycle: drafting, signing, approval and the sweeps that end leases.

Every status change goes through ``state_machine.next_status`` before any
field is written. Lease approval creates the payment schedule and the deposit
record in the same transaction as the status change.
"""

from datetime import date

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    MissingDocumentsError,
    MissingSignatureError,
    NotFoundError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.storage import LEASE_DOCUMENTS_PREFIX, StorageService
from ...core.uploads import DOCUMENT_TYPES, ValidatedUpload, validate_upload
from ...core.utils import timestamp_ms, utc_now, utc_today
from ..audit import crud as audit_crud
from ..audit import record_audit
from ..auth import crud as auth_crud
from ..auth.schemas import AuthenticatedUser
from ..deposits import services as deposit_services
from ..listings import crud as listing_crud
from ..listings.models import ApprovalStatus, Property
from ..listings.services import get_owned_property
from ..notifications import send_email, templates
from ..payments import services as payment_services
from . import crud
from .access import get_lease_for_landlord, get_lease_for_party, get_lease_for_tenant
from .documents import build_default_document
from .models import REQUIRED_TENANT_DOCUMENTS, Lease, LeaseStatus, TenantDocumentType
from .schemas import LeaseCreate, LeaseDocumentUrl, LeaseUpdate
from .state_machine import LeaseAction, next_status

logger = get_logger(__name__)


def _lease_url(lease_id: int, audience: str) -> str:
    return f"{settings.frontend_url}/{audience}/leases/{lease_id}"


def _require_text(value: str | None, field: str, message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(message, field=field)
    return text


def _check_terms(start_date: date, end_date: date) -> None:
    if end_date <= start_date:
        raise ValidationError("End date must be after start date", field="end_date")


async def _release_property(db: AsyncSession, property_obj: Property | None) -> None:
    """Relist a property once its lease ends, if it is still approved."""
    if property_obj and property_obj.approval_status == ApprovalStatus.APPROVED:
        await listing_crud.update_property(db, property_obj, is_available=True)


# ----- Landlord: drafting -----


async def create_draft_lease(
    db: AsyncSession, actor: AuthenticatedUser, data: LeaseCreate
) -> Lease:
    """Create a draft lease on one of the caller's properties.

    Raises:
        NotFoundError: If the property is not the caller's or the tenant has
            no account
        ValidationError: If the dates are inverted or the tenant is the
            landlord
    """
    property_obj = await get_owned_property(
        db, actor, data.property_id, allow_admin=False
    )

    if data.tenant_id is not None:
        tenant = await auth_crud.get_user_by_id(db, data.tenant_id)
    else:
        tenant = await auth_crud.get_user_by_email(db, data.tenant_email)
    if not tenant:
        raise NotFoundError("Tenant not found. Please ensure they have an account.")
    if tenant.id == actor.id:
        raise ValidationError("You cannot create a lease with yourself", field="tenant")

    _check_terms(data.start_date, data.end_date)

    if data.lease_document:
        lease_document = data.lease_document.model_dump()
    else:
        lease_document = build_default_document(
            data.monthly_rent,
            data.deposit,
            data.start_date,
            data.end_date,
            property_title=property_obj.title,
        )

    lease = await crud.create_lease(
        db,
        property_id=property_obj.id,
        tenant_id=tenant.id,
        landlord_id=actor.id,
        start_date=data.start_date,
        end_date=data.end_date,
        monthly_rent=data.monthly_rent,
        deposit=data.deposit,
        lease_document=lease_document,
        tenant_documents=[],
        status=LeaseStatus.DRAFT,
    )
    await db.commit()

    logger.info(
        "Draft lease created",
        extra={"lease_id": lease.id, "property_id": property_obj.id, "tenant_id": tenant.id},
    )
    return lease


async def update_draft_lease(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int, data: LeaseUpdate
) -> Lease:
    """Edit lease terms while the tenant has not signed."""
    lease = await get_lease_for_landlord(db, actor, lease_id)
    next_status(lease.status, LeaseAction.EDIT)

    changes = data.model_dump(exclude_unset=True)
    _check_terms(
        changes.get("start_date") or lease.start_date,
        changes.get("end_date") or lease.end_date,
    )
    if "lease_document" in changes and data.lease_document is not None:
        changes["lease_document"] = data.lease_document.model_dump()

    updated = await crud.update_lease(db, lease, **changes)
    await db.commit()
    return updated


async def send_to_tenant(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int
) -> Lease:
    """Send a draft (or revised) lease to the tenant for signing.

    Raises:
        InvalidLeaseTransition: If the lease is not a draft or under revision
        ValidationError: If the lease has no agreement clauses
    """
    lease = await get_lease_for_landlord(db, actor, lease_id)
    status = next_status(lease.status, LeaseAction.SEND)

    if not lease.start_date or not lease.end_date or not lease.monthly_rent:
        raise ValidationError("Lease terms are incomplete")
    if not (lease.lease_document or {}).get("clauses"):
        raise ValidationError(
            "Lease document must have at least one clause", field="lease_document"
        )

    updated = await crud.update_lease(db, lease, status=status, sent_at=utc_now())
    await db.commit()

    logger.info("Lease sent to tenant", extra={"lease_id": lease_id})

    subject, html = templates.lease_created(
        _lease_url(lease_id, "tenant"), updated.property.address
    )
    await send_email(updated.tenant.email, subject, html)
    return updated


# ----- Tenant: documents and signing -----


def _document_entry(doc_type: TenantDocumentType, key: str, name: str) -> dict:
    return {
        "type": doc_type.value,
        "key": key,
        "name": name,
        "uploaded_at": utc_now().isoformat(),
    }


def _merge_documents(existing: list[dict], new: list[dict]) -> list[dict]:
    """Replace documents of the same type, keep the rest."""
    replaced = {document["type"] for document in new}
    kept = [document for document in existing or [] if document.get("type") not in replaced]
    return [*kept, *new]


async def _store_document(
    storage: StorageService,
    lease_id: int,
    doc_type: TenantDocumentType,
    upload: ValidatedUpload,
) -> dict:
    key = (
        f"{LEASE_DOCUMENTS_PREFIX}/{lease_id}/"
        f"{timestamp_ms()}_{doc_type.value}_{upload.filename}"
    )
    await storage.upload(key, upload.content, upload.content_type)
    return _document_entry(doc_type, key, upload.filename)


async def upload_lease_document(
    db: AsyncSession,
    storage: StorageService,
    actor: AuthenticatedUser,
    lease_id: int,
    doc_type: TenantDocumentType,
    file: UploadFile,
) -> Lease:
    """Attach one supporting document, replacing any earlier one of its type."""
    lease = await get_lease_for_tenant(db, actor, lease_id)
    # Only allowed while the lease can still be signed
    next_status(lease.status, LeaseAction.SIGN)

    upload = await validate_upload(
        file, DOCUMENT_TYPES, settings.max_upload_size_mb, field=doc_type.value
    )
    entry = await _store_document(storage, lease_id, doc_type, upload)

    updated = await crud.update_lease(
        db,
        lease,
        tenant_documents=_merge_documents(lease.tenant_documents, [entry]),
    )
    await db.commit()
    return updated


async def submit_signed_lease(
    db: AsyncSession,
    storage: StorageService,
    actor: AuthenticatedUser,
    lease_id: int,
    signature: str | None,
    documents: dict[TenantDocumentType, UploadFile | None] | None = None,
) -> Lease:
    """Sign a lease as the tenant.

    Documents uploaded earlier count towards the required set. Nothing is
    stored or written until the signature and the ID documents are present.

    Raises:
        InvalidLeaseTransition: If the lease is not awaiting a signature
        MissingDocumentsError: If the ID front or back is missing
        MissingSignatureError: If the signature is empty
        ValidationError: If an uploaded file is of a bad type or too large
    """
    lease = await get_lease_for_tenant(db, actor, lease_id)
    status = next_status(lease.status, LeaseAction.SIGN)

    files = {
        doc_type: file
        for doc_type, file in (documents or {}).items()
        if file is not None and file.filename
    }
    present = {document.get("type") for document in lease.tenant_documents or []}
    present.update(doc_type.value for doc_type in files)
    missing = [
        doc_type.value for doc_type in REQUIRED_TENANT_DOCUMENTS if doc_type.value not in present
    ]
    if missing:
        raise MissingDocumentsError(missing)

    signature = (signature or "").strip()
    if not signature:
        raise MissingSignatureError()

    uploads = {
        doc_type: await validate_upload(
            file, DOCUMENT_TYPES, settings.max_upload_size_mb, field=doc_type.value
        )
        for doc_type, file in files.items()
    }
    entries = [
        await _store_document(storage, lease_id, doc_type, upload)
        for doc_type, upload in uploads.items()
    ]

    updated = await crud.update_lease(
        db,
        lease,
        status=status,
        tenant_signature=signature,
        tenant_documents=_merge_documents(lease.tenant_documents, entries),
        signed_at=utc_now(),
    )
    await db.commit()

    logger.info("Lease signed by tenant", extra={"lease_id": lease_id})

    subject, html = templates.tenant_signed(
        _lease_url(lease_id, "landlord"),
        updated.tenant.full_name,
        updated.property.address,
    )
    await send_email(updated.landlord.email, subject, html)
    return updated


# ----- Landlord: review -----


async def approve_lease(
    db: AsyncSession,
    actor: AuthenticatedUser,
    lease_id: int,
    landlord_signature: str | None = None,
    notes: str | None = None,
) -> Lease:
    """Approve a signed lease and set up its money side.

    In a single transaction: the lease is approved, the property is unlisted,
    the first month's rent is created, a pending deposit is opened when the
    lease has one, and the recurring rent schedule is generated.
    """
    lease = await get_lease_for_landlord(db, actor, lease_id)
    status = next_status(lease.status, LeaseAction.APPROVE)

    try:
        updated = await crud.update_lease(
            db,
            lease,
            status=status,
            landlord_signature=landlord_signature,
            landlord_notes=(notes or "").strip() or None,
            approved_at=utc_now(),
        )
        await listing_crud.update_property(db, lease.property, is_available=False)
        await payment_services.create_first_rent_payment(db, updated)
        if updated.deposit and updated.deposit > 0:
            await deposit_services.create_deposit(db, updated)
        await payment_services.generate_recurring_payments(db, updated.id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Lease approved",
        extra={"lease_id": lease_id, "property_id": updated.property_id},
    )

    subject, html = templates.lease_approved(
        _lease_url(lease_id, "tenant"), updated.property.address
    )
    await send_email(updated.tenant.email, subject, html)
    return updated


async def request_revision(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int, notes: str
) -> Lease:
    """Send a signed lease back to the tenant.

    The tenant's signature and documents are cleared so they sign again.
    """
    notes = _require_text(notes, "notes", "Revision notes are required")
    lease = await get_lease_for_landlord(db, actor, lease_id)
    status = next_status(lease.status, LeaseAction.REQUEST_REVISION)

    updated = await crud.update_lease(
        db,
        lease,
        status=status,
        landlord_notes=notes,
        tenant_signature=None,
        tenant_documents=[],
        signed_at=None,
    )
    await db.commit()

    logger.info("Lease revision requested", extra={"lease_id": lease_id})

    subject, html = templates.revision_requested(
        _lease_url(lease_id, "tenant"), updated.property.address, notes
    )
    await send_email(updated.tenant.email, subject, html)
    return updated


async def reject_lease(
    db: AsyncSession, actor: AuthenticatedUser, lease_id: int, reason: str
) -> Lease:
    reason = _require_text(reason, "reason", "A reason is required to reject a lease")
    lease = await get_lease_for_landlord(db, actor, lease_id)
    status = next_status(lease.status, LeaseAction.REJECT)

    updated = await crud.update_lease(db, lease, status=status, landlord_notes=reason)
    await db.commit()

    logger.info("Lease rejected", extra={"lease_id": lease_id})

    subject, html = templates.lease_rejected(updated.property.address, reason)
    await send_email(updated.tenant.email, subject, html)
    return updated


async def terminate_lease(
    db: AsyncSession,
    actor: AuthenticatedUser,
    lease_id: int,
    reason: str | None = None,
) -> Lease:
    """End an approved lease early and relist the property.

    Admins may terminate any lease; that action is audited.
    """
    lease = await crud.get_lease_by_id(db, lease_id)
    if not lease or not (actor.is_admin or lease.landlord_id == actor.id):
        raise NotFoundError("Lease not found or unauthorized")
    status = next_status(lease.status, LeaseAction.TERMINATE)

    reason = (reason or "").strip() or None
    changes = {"status": status, "terminated_at": utc_now()}
    if reason:
        changes["landlord_notes"] = reason
    updated = await crud.update_lease(db, lease, **changes)
    await _release_property(db, lease.property)

    if actor.is_admin and lease.landlord_id != actor.id:
        await record_audit(
            db,
            actor.id,
            audit_crud.TERMINATE_LEASE,
            "lease",
            lease_id,
            {"reason": reason, "landlord_id": lease.landlord_id},
        )
    await db.commit()

    logger.info("Lease terminated", extra={"lease_id": lease_id})
    return updated


async def expire_leases(db: AsyncSession, today: date | None = None) -> int:
    """Expire approved leases past their end date and relist their properties.

    Returns:
        Number of leases expired
    """
    today = today or utc_today()
    leases = await crud.get_expired_approved_leases(db, today)

    for lease in leases:
        await crud.update_lease(
            db, lease, status=next_status(lease.status, LeaseAction.EXPIRE)
        )
        property_obj = await listing_crud.get_property_by_id(db, lease.property_id)
        await _release_property(db, property_obj)
    await db.commit()

    if leases:
        logger.info("Leases expired", extra={"count": len(leases)})
    return len(leases)


# ----- Reads -----


async def get_lease(db: AsyncSession, actor: AuthenticatedUser, lease_id: int) -> Lease:
    return await get_lease_for_party(db, actor, lease_id)


async def list_landlord_leases(
    db: AsyncSession, actor: AuthenticatedUser, status: LeaseStatus | None = None
) -> list[Lease]:
    return await crud.get_leases_by_landlord(db, actor.id, status)


async def list_tenant_leases(
    db: AsyncSession, actor: AuthenticatedUser, status: LeaseStatus | None = None
) -> list[Lease]:
    return await crud.get_leases_by_tenant(db, actor.id, status)


async def get_document_urls(
    db: AsyncSession, storage: StorageService, actor: AuthenticatedUser, lease_id: int
) -> list[LeaseDocumentUrl]:
    """Signed, short-lived links to the tenant's documents."""
    lease = await get_lease_for_party(db, actor, lease_id)
    return [
        LeaseDocumentUrl(
            type=document["type"],
            name=document.get("name") or document["type"],
            url=await storage.signed_url(
                document.get("key"), expires_in=settings.signed_url_expiry_seconds
            ),
        )
        for document in lease.tenant_documents or []
    ]
