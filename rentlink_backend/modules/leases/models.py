"""Lease models."""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...core.database_types import value_enum
from ...database import Base, TimestampMixin
from ..auth.models import User
from ..listings.models import Property


class LeaseStatus(str, enum.Enum):
    """Lease lifecycle states."""

    DRAFT = "draft"
    SENT_TO_TENANT = "sent_to_tenant"
    TENANT_SIGNED = "tenant_signed"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class TenantDocumentType(str, enum.Enum):
    """Documents a tenant attaches when signing."""

    ID_FRONT = "id_front"
    ID_BACK = "id_back"
    PROOF_OF_INCOME = "proof_of_income"
    BANK_STATEMENT = "bank_statement"


REQUIRED_TENANT_DOCUMENTS = (TenantDocumentType.ID_FRONT, TenantDocumentType.ID_BACK)


class Lease(TimestampMixin, Base):
    """Agreement between a landlord and a tenant for one property."""

    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id"), nullable=False
    )
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )

    # {"title": str, "clauses": [{"id", "title", "content"}], "special_conditions": str}
    lease_document: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    # [{"type", "key", "name", "uploaded_at"}]
    tenant_documents: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    tenant_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    landlord_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    landlord_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[LeaseStatus] = mapped_column(
        value_enum(LeaseStatus), nullable=False, default=LeaseStatus.DRAFT
    )
    sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    signed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    terminated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    property: Mapped["Property"] = relationship("Property", lazy="raise")
    tenant: Mapped["User"] = relationship(
        "User", foreign_keys=[tenant_id], lazy="raise"
    )
    landlord: Mapped["User"] = relationship(
        "User", foreign_keys=[landlord_id], lazy="raise"
    )

    __table_args__ = (
        Index("ix_leases_property", "property_id"),
        Index("ix_leases_tenant", "tenant_id"),
        Index("ix_leases_landlord", "landlord_id"),
        Index("ix_leases_status", "status"),
    )

    def document_of_type(self, doc_type: TenantDocumentType) -> dict[str, Any] | None:
        for document in self.tenant_documents or []:
            if document.get("type") == doc_type.value:
                return document
        return None

    def __repr__(self) -> str:
        return f"<Lease(id={self.id}, property_id={self.property_id}, status={self.status})>"
