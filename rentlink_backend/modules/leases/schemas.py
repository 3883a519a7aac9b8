"""Lease schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, model_validator

from ..auth.schemas import UserSummary
from ..commons import ORMModel
from ..listings.schemas import PropertySummary
from .models import LeaseStatus, TenantDocumentType

# ----- Lease Document -----


class LeaseClause(BaseModel):
    id: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    is_required: bool = False


class LeaseDocument(BaseModel):
    """Agreement text shown to the tenant for signing."""

    title: str = Field(..., min_length=1, max_length=255)
    clauses: list[LeaseClause] = Field(default_factory=list)
    notice_period_days: int | None = Field(None, ge=0)
    special_conditions: str | None = None


class TenantDocument(BaseModel):
    type: TenantDocumentType
    key: str
    name: str
    uploaded_at: datetime


# ----- Lease Schemas -----


class LeaseCreate(BaseModel):
    """Schema for creating a draft lease.

    The tenant is identified either by ``tenant_id`` or by ``tenant_email``.
    """

    property_id: int
    tenant_id: int | None = None
    tenant_email: EmailStr | None = None
    start_date: date
    end_date: date
    monthly_rent: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    deposit: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    lease_document: LeaseDocument | None = None

    @model_validator(mode="after")
    def check_tenant_reference(self):
        if self.tenant_id is None and not self.tenant_email:
            raise ValueError("Either tenant_id or tenant_email is required")
        return self


class LeaseUpdate(BaseModel):
    """Schema for editing a draft lease."""

    start_date: date | None = None
    end_date: date | None = None
    monthly_rent: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    deposit: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    lease_document: LeaseDocument | None = None

    @model_validator(mode="after")
    def reject_null_terms(self):
        for field in ("start_date", "end_date", "monthly_rent", "deposit"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class LeaseApproval(BaseModel):
    landlord_signature: str | None = None
    notes: str | None = Field(None, max_length=2000)


class LeaseRevisionRequest(BaseModel):
    notes: str = Field(..., min_length=1, max_length=2000)


class LeaseRejection(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class LeaseResponse(ORMModel):
    """Schema for lease response."""

    id: int
    property_id: int
    tenant_id: int
    landlord_id: int
    start_date: date
    end_date: date
    monthly_rent: Decimal
    deposit: Decimal
    lease_document: LeaseDocument | None = None
    tenant_documents: list[TenantDocument] = Field(default_factory=list)
    tenant_signature: str | None = None
    landlord_signature: str | None = None
    landlord_notes: str | None = None
    status: LeaseStatus
    sent_at: datetime | None = None
    signed_at: datetime | None = None
    approved_at: datetime | None = None
    terminated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    property: PropertySummary | None = None
    tenant: UserSummary | None = None
    landlord: UserSummary | None = None


class LeaseDocumentUrl(BaseModel):
    type: TenantDocumentType
    name: str
    url: str | None = None


class LeaseTermination(BaseModel):
    reason: str | None = Field(None, max_length=2000)
