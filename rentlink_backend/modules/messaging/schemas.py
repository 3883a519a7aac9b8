"""Messaging schemas."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from ..auth.schemas import UserSummary
from ..commons import ORMModel
from ..listings.schemas import PropertySummary
from .models import InquiryStatus


class InquiryCreate(BaseModel):
    """First (or follow-up) message from a tenant about a property."""

    property_id: int
    message: str = Field(..., min_length=1, max_length=5000)
    move_in_date: date | None = None


class InquiryStart(BaseModel):
    property_id: int


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus


class InquiryResponse(ORMModel):
    """Schema for inquiry response."""

    id: int
    property_id: int
    tenant_id: int
    landlord_id: int
    message: str | None = None
    status: InquiryStatus
    move_in_date: date | None = None
    created_at: datetime
    updated_at: datetime

    property: PropertySummary | None = None
    tenant: UserSummary | None = None
    landlord: UserSummary | None = None


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class MessageResponse(ORMModel):
    id: int
    inquiry_id: int
    sender_id: int
    content: str
    read_at: datetime | None = None
    created_at: datetime


class InquirySummary(BaseModel):
    """Inbox entry: the inquiry with the other party and its latest message."""

    inquiry: InquiryResponse
    other_party: UserSummary | None = None
    last_message: MessageResponse | None = None
    unread_count: int = 0
    last_activity_at: datetime


class MarkReadResult(BaseModel):
    marked: int
