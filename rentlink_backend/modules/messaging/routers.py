"""Inquiry and messaging API routes."""

from fastapi import APIRouter

from ...database import DBSession
from ..auth.dependencies import CurrentUser
from ..commons import BaseResponse
from . import services
from .models import InquiryStatus
from .schemas import (
    InquiryCreate,
    InquiryResponse,
    InquiryStart,
    InquiryStatusUpdate,
    InquirySummary,
    MarkReadResult,
    MessageCreate,
    MessageResponse,
)

router = APIRouter(prefix="/inquiries", tags=["Inquiries"])


@router.get("", response_model=BaseResponse[list[InquirySummary]])
async def list_inquiries(
    current_user: CurrentUser, db: DBSession, status: InquiryStatus | None = None
):
    """Get the caller's inquiries as tenant or landlord."""
    summaries = await services.list_user_inquiries(db, current_user, status)
    return BaseResponse(success=True, data=summaries)


@router.post("", response_model=BaseResponse[InquiryResponse])
async def create_inquiry(data: InquiryCreate, current_user: CurrentUser, db: DBSession):
    """Send an inquiry about a property."""
    inquiry = await services.create_inquiry(
        db, current_user, data.property_id, data.message, data.move_in_date
    )
    return BaseResponse(
        success=True,
        message="Inquiry sent",
        data=InquiryResponse.model_validate(inquiry),
    )


@router.post("/start", response_model=BaseResponse[InquiryResponse])
async def start_inquiry(data: InquiryStart, current_user: CurrentUser, db: DBSession):
    """Open (or reuse) a conversation about a property without a message."""
    inquiry = await services.get_or_create_inquiry(db, current_user, data.property_id)
    return BaseResponse(success=True, data=InquiryResponse.model_validate(inquiry))


@router.get("/{inquiry_id}", response_model=BaseResponse[InquiryResponse])
async def get_inquiry(inquiry_id: int, current_user: CurrentUser, db: DBSession):
    inquiry = await services.get_inquiry(db, current_user, inquiry_id)
    return BaseResponse(success=True, data=InquiryResponse.model_validate(inquiry))


@router.patch("/{inquiry_id}/status", response_model=BaseResponse[InquiryResponse])
async def update_inquiry_status(
    inquiry_id: int,
    data: InquiryStatusUpdate,
    current_user: CurrentUser,
    db: DBSession,
):
    """Update an inquiry's status (landlord only)."""
    inquiry = await services.update_inquiry_status(
        db, current_user, inquiry_id, data.status
    )
    return BaseResponse(
        success=True,
        message="Inquiry status updated",
        data=InquiryResponse.model_validate(inquiry),
    )


@router.get(
    "/{inquiry_id}/messages", response_model=BaseResponse[list[MessageResponse]]
)
async def list_messages(inquiry_id: int, current_user: CurrentUser, db: DBSession):
    messages = await services.list_messages(db, current_user, inquiry_id)
    return BaseResponse(
        success=True, data=[MessageResponse.model_validate(m) for m in messages]
    )


@router.post("/{inquiry_id}/messages", response_model=BaseResponse[MessageResponse])
async def send_message(
    inquiry_id: int, data: MessageCreate, current_user: CurrentUser, db: DBSession
):
    message = await services.send_message(db, current_user, inquiry_id, data.content)
    return BaseResponse(
        success=True,
        message="Message sent",
        data=MessageResponse.model_validate(message),
    )


@router.post("/{inquiry_id}/read", response_model=BaseResponse[MarkReadResult])
async def mark_messages_read(inquiry_id: int, current_user: CurrentUser, db: DBSession):
    """Mark the other party's messages as read."""
    marked = await services.mark_as_read(db, current_user, inquiry_id)
    return BaseResponse(success=True, data=MarkReadResult(marked=marked))
