"""Inquiries and chat messages between tenants and landlords."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ...core.logging import get_logger
from ...core.utils import as_utc, utc_now
from ..auth.schemas import AuthenticatedUser, UserSummary
from ..listings import crud as listing_crud
from ..listings.models import Property
from . import crud
from .models import Inquiry, InquiryStatus, Message
from .schemas import InquiryResponse, InquirySummary, MessageResponse

logger = get_logger(__name__)


async def _get_property(db: AsyncSession, property_id: int) -> Property:
    property_obj = await listing_crud.get_property_by_id(db, property_id)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")
    return property_obj


async def _get_inquiry_for_participant(
    db: AsyncSession, actor: AuthenticatedUser, inquiry_id: int
) -> Inquiry:
    inquiry = await crud.get_inquiry_by_id(db, inquiry_id)
    if not inquiry or actor.id not in (inquiry.tenant_id, inquiry.landlord_id):
        raise NotFoundError("Inquiry not found or unauthorized")
    return inquiry


def _check_not_own_property(actor: AuthenticatedUser, property_obj: Property) -> None:
    if property_obj.landlord_id == actor.id:
        raise ValidationError("You cannot send an inquiry about your own property")


async def get_or_create_inquiry(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> Inquiry:
    """The caller's conversation about a property, started if needed."""
    property_obj = await _get_property(db, property_id)
    _check_not_own_property(actor, property_obj)

    inquiry = await crud.get_inquiry_for_tenant_property(db, actor.id, property_id)
    if inquiry:
        return inquiry

    inquiry = await crud.create_inquiry(
        db,
        property_id=property_id,
        tenant_id=actor.id,
        landlord_id=property_obj.landlord_id,
        message=None,
        status=InquiryStatus.PENDING,
    )
    await db.commit()

    logger.info(
        "Inquiry started", extra={"inquiry_id": inquiry.id, "property_id": property_id}
    )
    return inquiry


async def create_inquiry(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    message: str,
    move_in_date: date | None = None,
) -> Inquiry:
    """Ask about a property.

    A tenant has one inquiry per property; asking again adds a message to
    the existing conversation.
    """
    content = (message or "").strip()
    if not content:
        raise ValidationError("Message cannot be empty", field="message")

    property_obj = await _get_property(db, property_id)
    _check_not_own_property(actor, property_obj)

    inquiry = await crud.get_inquiry_for_tenant_property(db, actor.id, property_id)
    if inquiry:
        if move_in_date:
            inquiry = await crud.update_inquiry(db, inquiry, move_in_date=move_in_date)
    else:
        inquiry = await crud.create_inquiry(
            db,
            property_id=property_id,
            tenant_id=actor.id,
            landlord_id=property_obj.landlord_id,
            message=content,
            move_in_date=move_in_date,
            status=InquiryStatus.PENDING,
        )

    await crud.create_message(db, inquiry.id, actor.id, content, utc_now())
    await db.commit()

    logger.info(
        "Inquiry message sent",
        extra={"inquiry_id": inquiry.id, "property_id": property_id},
    )
    return inquiry


async def update_inquiry_status(
    db: AsyncSession, actor: AuthenticatedUser, inquiry_id: int, status: InquiryStatus
) -> Inquiry:
    """Change an inquiry's status. Only the landlord may do this."""
    inquiry = await _get_inquiry_for_participant(db, actor, inquiry_id)
    if inquiry.landlord_id != actor.id:
        raise PermissionDeniedError("update", "inquiry status")

    updated = await crud.update_inquiry(db, inquiry, status=status)
    await db.commit()

    logger.info(
        "Inquiry status updated",
        extra={"inquiry_id": inquiry_id, "status": status.value},
    )
    return updated


async def get_inquiry(
    db: AsyncSession, actor: AuthenticatedUser, inquiry_id: int
) -> Inquiry:
    return await _get_inquiry_for_participant(db, actor, inquiry_id)


async def send_message(
    db: AsyncSession, actor: AuthenticatedUser, inquiry_id: int, content: str
) -> Message:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Message cannot be empty", field="content")

    inquiry = await _get_inquiry_for_participant(db, actor, inquiry_id)
    message = await crud.create_message(db, inquiry.id, actor.id, content, utc_now())
    await db.commit()
    return message


async def list_messages(
    db: AsyncSession, actor: AuthenticatedUser, inquiry_id: int
) -> list[Message]:
    await _get_inquiry_for_participant(db, actor, inquiry_id)
    return await crud.get_messages(db, inquiry_id)


async def mark_as_read(
    db: AsyncSession, actor: AuthenticatedUser, inquiry_id: int
) -> int:
    """Mark the other party's unread messages as read. Returns the count."""
    await _get_inquiry_for_participant(db, actor, inquiry_id)
    marked = await crud.mark_read(db, inquiry_id, actor.id, utc_now())
    await db.commit()
    return marked


async def list_user_inquiries(
    db: AsyncSession, actor: AuthenticatedUser, status: InquiryStatus | None = None
) -> list[InquirySummary]:
    """The caller's inbox, most recent activity first."""
    inquiries = await crud.get_inquiries_for_user(db, actor.id, status)

    summaries = []
    for inquiry in inquiries:
        last_message = await crud.get_last_message(db, inquiry.id)
        other_party = (
            inquiry.tenant if inquiry.landlord_id == actor.id else inquiry.landlord
        )
        last_activity = last_message.created_at if last_message else inquiry.created_at
        summaries.append(
            InquirySummary(
                inquiry=InquiryResponse.model_validate(inquiry),
                other_party=UserSummary.model_validate(other_party) if other_party else None,
                last_message=MessageResponse.model_validate(last_message)
                if last_message
                else None,
                unread_count=await crud.count_unread(db, inquiry.id, actor.id),
                last_activity_at=as_utc(last_activity),
            )
        )

    summaries.sort(key=lambda summary: summary.last_activity_at, reverse=True)
    return summaries
