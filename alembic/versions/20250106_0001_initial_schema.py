"""Initial schema for the RentLink marketplace

Revision ID: 0001
Revises:
Create Date: 2025-01-06

Creates all tables for:
- Auth (users, refresh_tokens)
- Listings (properties, saved_properties, recently_viewed)
- Landlord verification (landlord_requests)
- Leases (leases, payments, deposits)
- Messaging (inquiries, messages)
- Admin audit trail (audit_logs)
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("tenant", "landlord", "admin", name="userrole")
property_type = sa.Enum(
    "apartment", "house", "room", "commercial", name="propertytype"
)
approval_status = sa.Enum("pending", "approved", "rejected", name="approvalstatus")
id_type = sa.Enum("national_id", "passport", "drivers_license", name="idtype")
lease_status = sa.Enum(
    "draft",
    "sent_to_tenant",
    "tenant_signed",
    "approved",
    "rejected",
    "revision_requested",
    "expired",
    "terminated",
    name="leasestatus",
)
payment_type = sa.Enum("rent", "deposit", "late_fee", name="paymenttype")
payment_status = sa.Enum("pending", "paid", "overdue", name="paymentstatus")
deposit_status = sa.Enum(
    "pending", "held", "released", "forfeited", "partial_release", name="depositstatus"
)
deposit_payment_method = sa.Enum(
    "cash", "bank_transfer", "eft", name="depositpaymentmethod"
)
inquiry_status = sa.Enum(
    "pending", "approved", "rejected", "completed", name="inquirystatus"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
    ]


def upgrade() -> None:
    """Create all tables."""

    # =====================
    # AUTH
    # =====================

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(128), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default="tenant"),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token_hash", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_agent", sa.String(500), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token_hash"),
    )
    op.create_index("ix_refresh_tokens_user", "refresh_tokens", ["user_id"])

    # =====================
    # LISTINGS
    # =====================

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("property_type", property_type, nullable=False, server_default="apartment"),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("latitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("longitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("size_sqm", sa.Numeric(10, 2), nullable=True),
        sa.Column("amenities", sa.JSON(), nullable=False),
        sa.Column("pet_policy", sa.String(255), nullable=True),
        sa.Column("utilities_included", sa.JSON(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("approval_status", approval_status, nullable=False, server_default="pending"),
        sa.Column("approval_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_properties_landlord", "properties", ["landlord_id"])
    op.create_index("ix_properties_city", "properties", ["city"])
    op.create_index("ix_properties_available", "properties", ["is_available"])
    op.create_index("ix_properties_approval", "properties", ["approval_status"])

    op.create_table(
        "saved_properties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "property_id", name="uq_saved_user_property"),
    )

    op.create_table(
        "recently_viewed",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "property_id", name="uq_recent_user_property"),
    )
    op.create_index(
        "ix_recently_viewed_user_time", "recently_viewed", ["user_id", "viewed_at"]
    )

    # =====================
    # LANDLORD VERIFICATION
    # =====================

    op.create_table(
        "landlord_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("status", approval_status, nullable=False, server_default="pending"),
        sa.Column("id_type", id_type, nullable=False),
        sa.Column("id_number", sa.String(100), nullable=False),
        sa.Column("business_name", sa.String(255), nullable=True),
        sa.Column("business_registration", sa.String(255), nullable=True),
        sa.Column("id_front_key", sa.String(500), nullable=True),
        sa.Column("id_back_key", sa.String(500), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("previous_request_id", sa.Integer(), nullable=True),
        sa.Column("is_resubmission", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["previous_request_id"], ["landlord_requests.id"]),
        sa.ForeignKeyConstraint(["reviewed_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_landlord_requests_user", "landlord_requests", ["user_id"])
    op.create_index("ix_landlord_requests_status", "landlord_requests", ["status"])

    # =====================
    # LEASES AND MONEY
    # =====================

    op.create_table(
        "leases",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("monthly_rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("lease_document", sa.JSON(), nullable=True),
        sa.Column("tenant_documents", sa.JSON(), nullable=False),
        sa.Column("tenant_signature", sa.Text(), nullable=True),
        sa.Column("landlord_signature", sa.Text(), nullable=True),
        sa.Column("landlord_notes", sa.Text(), nullable=True),
        sa.Column("status", lease_status, nullable=False, server_default="draft"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("signed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("terminated_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_leases_property", "leases", ["property_id"])
    op.create_index("ix_leases_tenant", "leases", ["tenant_id"])
    op.create_index("ix_leases_landlord", "leases", ["landlord_id"])
    op.create_index("ix_leases_status", "leases", ["status"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lease_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("type", payment_type, nullable=False, server_default="rent"),
        sa.Column("status", payment_status, nullable=False, server_default="pending"),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["lease_id"], ["leases.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("lease_id", "type", "due_date", name="uq_payment_lease_type_due"),
    )
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("ix_payments_due_date", "payments", ["due_date"])

    op.create_table(
        "deposits",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lease_id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", deposit_status, nullable=False, server_default="pending"),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_method", deposit_payment_method, nullable=True),
        sa.Column("payment_reference", sa.String(255), nullable=True),
        sa.Column("release_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("release_requested_by", sa.Integer(), nullable=True),
        sa.Column("release_reason", sa.Text(), nullable=True),
        sa.Column("deduction_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("deduction_reason", sa.Text(), nullable=True),
        sa.Column("released_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["lease_id"], ["leases.id"]),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["release_requested_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("lease_id"),
    )
    op.create_index("ix_deposits_tenant", "deposits", ["tenant_id"])
    op.create_index("ix_deposits_landlord", "deposits", ["landlord_id"])
    op.create_index("ix_deposits_status", "deposits", ["status"])

    # =====================
    # MESSAGING
    # =====================

    op.create_table(
        "inquiries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", inquiry_status, nullable=False, server_default="pending"),
        sa.Column("move_in_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["landlord_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inquiries_property", "inquiries", ["property_id"])
    op.create_index("ix_inquiries_tenant", "inquiries", ["tenant_id"])
    op.create_index("ix_inquiries_landlord", "inquiries", ["landlord_id"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("inquiry_id", sa.Integer(), nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["inquiry_id"], ["inquiries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_messages_inquiry", "messages", ["inquiry_id", "created_at"])
    op.create_index("ix_messages_sender", "messages", ["sender_id"])

    # =====================
    # AUDIT
    # =====================

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("admin_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("target_type", sa.String(64), nullable=False),
        sa.Column("target_id", sa.String(64), nullable=False),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["admin_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_admin", "audit_logs", ["admin_id"])
    op.create_index("ix_audit_logs_target", "audit_logs", ["target_type", "target_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""

    op.drop_table("audit_logs")

    # Drop messaging tables
    op.drop_table("messages")
    op.drop_table("inquiries")

    # Drop lease tables
    op.drop_table("deposits")
    op.drop_table("payments")
    op.drop_table("leases")

    op.drop_table("landlord_requests")

    # Drop listing tables
    op.drop_table("recently_viewed")
    op.drop_table("saved_properties")
    op.drop_table("properties")

    # Drop auth tables
    op.drop_table("refresh_tokens")
    op.drop_table("users")
