"""Listing schemas."""

import enum
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from ..commons import ORMModel
from .models import ApprovalStatus, PropertyType

# ----- Property Schemas -----


class PropertyBase(BaseModel):
    """Fields a landlord controls on a listing."""

    title: str = Field(..., min_length=3, max_length=255)
    description: str | None = None
    property_type: PropertyType = PropertyType.APARTMENT
    address: str = Field(..., min_length=3, max_length=255)
    city: str = Field(..., min_length=2, max_length=120)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    size_sqm: float | None = Field(None, gt=0)
    amenities: list[str] = Field(default_factory=list)
    pet_policy: str | None = Field(None, max_length=255)
    utilities_included: list[str] = Field(default_factory=list)


class PropertyCreate(PropertyBase):
    """Schema for creating a property."""

    pass


class PropertyUpdate(BaseModel):
    """Schema for updating a property.

    Approval state is not editable here, and images change only through the
    upload endpoint.
    """

    title: str | None = Field(None, min_length=3, max_length=255)
    description: str | None = None
    property_type: PropertyType | None = None
    address: str | None = Field(None, min_length=3, max_length=255)
    city: str | None = Field(None, min_length=2, max_length=120)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    size_sqm: float | None = Field(None, gt=0)
    amenities: list[str] | None = None
    pet_policy: str | None = Field(None, max_length=255)
    utilities_included: list[str] | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        required = (
            "title",
            "property_type",
            "address",
            "city",
            "price",
            "amenities",
            "utilities_included",
        )
        for field in required:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class PropertyResponse(PropertyBase, ORMModel):
    """Schema for property response."""

    id: int
    landlord_id: int
    images: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    is_available: bool
    featured: bool
    approval_status: ApprovalStatus
    approval_requested_at: datetime | None = None
    admin_notes: str | None = None
    created_at: datetime
    updated_at: datetime


class AvailabilityUpdate(BaseModel):
    is_available: bool


class DecisionType(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class AdminDecision(BaseModel):
    """Admin moderation decision on a listing."""

    decision: DecisionType
    notes: str | None = Field(None, max_length=2000)


class PropertySearchParams(BaseModel):
    """Filters for the public listing search."""

    query: str | None = None
    city: str | None = None
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)
    bedrooms: int | None = Field(None, ge=0)
    property_type: PropertyType | None = None


class SavedToggleResponse(BaseModel):
    property_id: int
    saved: bool


class PropertySummary(ORMModel):
    """Compact property reference embedded in lease and inquiry responses."""

    id: int
    title: str
    address: str
    city: str
    landlord_id: int
