"""Verification schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from ..auth.schemas import UserSummary
from ..commons import ORMModel
from ..listings.models import ApprovalStatus
from .models import IdType


class VerificationSubmit(BaseModel):
    """Applicant details sent alongside the two ID images."""

    id_type: IdType
    id_number: str = Field(..., min_length=5, max_length=100)
    business_name: str | None = Field(None, max_length=255)
    business_registration: str | None = Field(None, max_length=255)


class VerificationResponse(ORMModel):
    """Schema for verification request response."""

    id: int
    user_id: int
    status: ApprovalStatus
    id_type: IdType
    id_number: str
    business_name: str | None = None
    business_registration: str | None = None
    submitted_at: datetime
    previous_request_id: int | None = None
    is_resubmission: bool
    admin_notes: str | None = None
    reviewed_at: datetime | None = None
    reviewed_by: int | None = None
    created_at: datetime


class VerificationDetail(BaseModel):
    """Admin view of a request with its documents and earlier attempts."""

    request: VerificationResponse
    user: UserSummary
    id_front_url: str | None = None
    id_back_url: str | None = None
    history: list[VerificationResponse] = Field(default_factory=list)


class VerificationApproval(BaseModel):
    notes: str | None = Field(None, max_length=2000)


class VerificationRejection(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)
