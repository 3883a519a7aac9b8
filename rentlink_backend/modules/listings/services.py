"""Listing business logic: ownership, approval workflow and availability."""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    AlreadyApprovedError,
    AlreadyPendingError,
    BusinessLogicError,
    NotApprovedError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.storage import PROPERTY_IMAGES_PREFIX
from ...core.utils import utc_now
from ..audit import crud as audit_crud
from ..audit import record_audit
from ..auth.models import UserRole
from ..auth.schemas import AuthenticatedUser
from ..commons import StatusCounts
from . import crud
from .models import ApprovalStatus, Property
from .schemas import (
    AdminDecision,
    DecisionType,
    PropertyCreate,
    PropertyUpdate,
)

logger = get_logger(__name__)


async def get_owned_property(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    allow_admin: bool = True,
) -> Property:
    """Fetch a property the caller owns (or any property, for admins).

    Missing and foreign properties raise the same error.

    Raises:
        NotFoundError: If the property does not exist or is not the caller's
    """
    property_obj = await crud.get_property_by_id(db, property_id)
    if not property_obj:
        raise NotFoundError("Property not found or unauthorized")
    if property_obj.landlord_id != actor.id and not (allow_admin and actor.is_admin):
        raise NotFoundError("Property not found or unauthorized")
    return property_obj


async def create_listing(
    db: AsyncSession, actor: AuthenticatedUser, data: PropertyCreate
) -> Property:
    """Create a listing awaiting admin approval.

    New listings always start pending and unlisted.

    Raises:
        PermissionDeniedError: If the caller is not a landlord or admin
    """
    if actor.role not in (UserRole.LANDLORD, UserRole.ADMIN):
        raise PermissionDeniedError("create", "property listings")

    property_obj = await crud.create_property(
        db,
        landlord_id=actor.id,
        **data.model_dump(),
        images=[],
        is_available=False,
        featured=False,
        approval_status=ApprovalStatus.PENDING,
        approval_requested_at=utc_now(),
    )
    await db.commit()

    logger.info(
        "Property created",
        extra={"property_id": property_obj.id, "landlord_id": actor.id},
    )
    return property_obj


async def update_listing(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    data: PropertyUpdate,
) -> Property:
    """Update listing fields. Approval state and availability are untouched."""
    property_obj = await get_owned_property(db, actor, property_id)

    updated = await crud.update_property(
        db, property_obj, **data.model_dump(exclude_unset=True)
    )
    await db.commit()
    return updated


async def add_images(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int, keys: list[str]
) -> Property:
    prefix = f"{PROPERTY_IMAGES_PREFIX}/{property_id}/"
    foreign = [key for key in keys if not key.startswith(prefix)]
    if foreign:
        raise ValidationError(f"Image keys must start with {prefix}", field="images")

    property_obj = await get_owned_property(db, actor, property_id)
    updated = await crud.update_property(
        db, property_obj, images=[*(property_obj.images or []), *keys]
    )
    await db.commit()
    return updated


async def delete_listing(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> None:
    """Delete a listing.

    Raises:
        BusinessLogicError: If leases still reference the property
    """
    from ..leases import crud as lease_crud

    property_obj = await get_owned_property(db, actor, property_id)

    if await lease_crud.count_leases_for_property(db, property_id) > 0:
        raise BusinessLogicError(
            "Property has lease records and cannot be deleted. Unlist it instead."
        )

    await crud.delete_property(db, property_obj)
    if actor.is_admin and property_obj.landlord_id != actor.id:
        await record_audit(
            db, actor.id, audit_crud.DELETE_PROPERTY, "property", property_id
        )
    await db.commit()

    logger.info("Property deleted", extra={"property_id": property_id})


async def request_reapproval(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> Property:
    """Send a rejected listing back to the admin queue.

    Raises:
        NotFoundError: If the property is not the caller's
        AlreadyApprovedError: If the property is already approved
        AlreadyPendingError: If the property is already waiting for review
    """
    property_obj = await get_owned_property(db, actor, property_id, allow_admin=False)

    if property_obj.approval_status == ApprovalStatus.APPROVED:
        raise AlreadyApprovedError("Property")
    if property_obj.approval_status == ApprovalStatus.PENDING:
        raise AlreadyPendingError("Property")

    updated = await crud.update_property(
        db,
        property_obj,
        approval_status=ApprovalStatus.PENDING,
        approval_requested_at=utc_now(),
        admin_notes=None,
    )
    await db.commit()

    logger.info("Property re-approval requested", extra={"property_id": property_id})
    return updated


async def set_availability(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    is_available: bool,
) -> Property:
    """List or unlist a property.

    Raises:
        NotApprovedError: If listing a property that is not approved
    """
    property_obj = await get_owned_property(db, actor, property_id)

    if is_available and property_obj.approval_status != ApprovalStatus.APPROVED:
        raise NotApprovedError()

    updated = await crud.update_property(db, property_obj, is_available=is_available)
    await db.commit()
    return updated


async def admin_decide(
    db: AsyncSession,
    admin: AuthenticatedUser,
    property_id: int,
    decision: AdminDecision,
) -> Property:
    """Approve or reject a listing.

    Approval lists the property. Rejection unlists it and stores the notes
    so the landlord can see what to fix.

    Raises:
        PermissionDeniedError: If the caller is not an admin
        NotFoundError: If the property does not exist
        ValidationError: If a rejection has no notes
    """
    if not admin.is_admin:
        raise PermissionDeniedError("moderate", "property listings")

    property_obj = await crud.get_property_by_id(db, property_id)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")

    notes = (decision.notes or "").strip() or None

    if decision.decision == DecisionType.APPROVE:
        updated = await crud.update_property(
            db,
            property_obj,
            approval_status=ApprovalStatus.APPROVED,
            is_available=True,
            admin_notes=notes,
        )
        action = audit_crud.APPROVE_PROPERTY
    else:
        if not notes:
            raise ValidationError("A reason is required to reject a property", field="notes")
        updated = await crud.update_property(
            db,
            property_obj,
            approval_status=ApprovalStatus.REJECTED,
            is_available=False,
            admin_notes=notes,
        )
        action = audit_crud.REJECT_PROPERTY

    await record_audit(
        db,
        admin.id,
        action,
        "property",
        property_id,
        {"notes": notes, "landlord_id": property_obj.landlord_id},
    )
    await db.commit()

    logger.info(
        "Property moderated",
        extra={"property_id": property_id, "decision": decision.decision.value},
    )
    return updated


async def property_stats(db: AsyncSession) -> StatusCounts:
    counts = await crud.count_by_approval_status(db)
    return StatusCounts(
        total=sum(counts.values()),
        pending=counts.get(ApprovalStatus.PENDING, 0),
        approved=counts.get(ApprovalStatus.APPROVED, 0),
        rejected=counts.get(ApprovalStatus.REJECTED, 0),
    )


async def get_public_listing(
    db: AsyncSession, property_id: int, viewer: AuthenticatedUser | None = None
) -> Property:
    """Get a listing for display.

    Unlisted properties are only visible to their owner and admins. A signed
    in viewer gets the property added to their recently viewed list.
    """
    property_obj = await crud.get_property_by_id(db, property_id)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")

    is_privileged = viewer is not None and (
        viewer.is_admin or viewer.id == property_obj.landlord_id
    )
    if not property_obj.is_available and not is_privileged:
        raise NotFoundError(f"Property with ID {property_id} not found")

    if viewer is not None and viewer.id != property_obj.landlord_id:
        await crud.upsert_recently_viewed(db, viewer.id, property_id, utc_now())
        await db.commit()

    return property_obj


# ----- Saved Properties -----


async def toggle_saved(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> bool:
    """Save or unsave a property. Returns the new saved state."""
    property_obj = await crud.get_property_by_id(db, property_id)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")

    existing = await crud.get_saved(db, actor.id, property_id)
    if existing:
        await crud.remove_saved(db, existing)
        saved = False
    else:
        await crud.add_saved(db, actor.id, property_id)
        saved = True
    await db.commit()
    return saved


async def is_saved(db: AsyncSession, actor: AuthenticatedUser, property_id: int) -> bool:
    return await crud.get_saved(db, actor.id, property_id) is not None
