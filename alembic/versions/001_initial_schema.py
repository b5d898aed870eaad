"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates all tables for the settlement service:
- Rate settings (versioned)
- Bookings ledger
- Host payout profiles
- Payouts and payout adjustments
- Admin (audit logs, disputes)
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== RATE SETTINGS ====================
    op.create_table(
        "rate_settings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("version", sa.Integer, unique=True, nullable=False, index=True),
        sa.Column("commission_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("commission_type", sa.String(20), nullable=False, server_default="percentage"),
        sa.Column("fixed_commission_amount", sa.Numeric(12, 2)),
        sa.Column("commission_on_cleaning_fee", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("commission_on_extra_guests", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("gst_enabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("gst_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("gst_number", sa.String(20)),
        sa.Column("gst_on_commission", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("gst_inclusive", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("tcs_enabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("tcs_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("tcs_threshold", sa.Numeric(12, 2), nullable=False),
        sa.Column("platform_fee_enabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("platform_fee_type", sa.String(20), nullable=False, server_default="percentage"),
        sa.Column("platform_fee_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("fixed_platform_fee", sa.Numeric(12, 2)),
        sa.Column("change_note", sa.Text),
        sa.Column("created_by", postgresql.UUID(as_uuid=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_reference", sa.String(20), unique=True, nullable=False, index=True),
        sa.Column("host_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("guest_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("stay_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("check_in", sa.Date, nullable=False),
        sa.Column("check_out", sa.Date, nullable=False),
        sa.Column("guests", sa.Integer, default=1),
        sa.Column("base_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(12, 2), server_default="0"),
        sa.Column("extra_guest_charge", sa.Numeric(12, 2), server_default="0"),
        sa.Column("discount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("penalties", sa.Numeric(12, 2), server_default="0"),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), server_default="INR"),
        # Cached breakdown
        sa.Column("commission_amount", sa.Numeric(12, 2)),
        sa.Column("gst_amount", sa.Numeric(12, 2)),
        sa.Column("tcs_amount", sa.Numeric(12, 2)),
        sa.Column("platform_fee_amount", sa.Numeric(12, 2)),
        sa.Column("total_deductions", sa.Numeric(12, 2)),
        sa.Column("net_payout", sa.Numeric(12, 2)),
        sa.Column("financials_excluded_addons", sa.Numeric(12, 2)),
        sa.Column("financials_total_amount", sa.Numeric(12, 2)),
        sa.Column("financials_settings_version", sa.Integer),
        sa.Column("financials_computed_at", sa.DateTime(timezone=True)),
        # Status
        sa.Column("payment_status", sa.String(20), server_default="pending", index=True),
        sa.Column("booking_status", sa.String(20), server_default="upcoming", index=True),
        sa.Column("refund_status", sa.String(20), server_default="none"),
        sa.Column("refund_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("refund_reason", sa.Text),
        sa.Column("refund_requested_at", sa.DateTime(timezone=True)),
        sa.Column("refund_decided_at", sa.DateTime(timezone=True)),
        sa.Column("refund_decided_by", postgresql.UUID(as_uuid=True)),
        sa.Column("refund_processed_at", sa.DateTime(timezone=True)),
        sa.Column("refund_gateway_reference", sa.String(100)),
        sa.Column("dispute_status", sa.String(20), server_default="none"),
        sa.Column("dispute_reason", sa.Text),
        sa.Column("dispute_raised_at", sa.DateTime(timezone=True)),
        sa.Column("dispute_resolution", sa.Text),
        sa.Column("dispute_resolved_at", sa.DateTime(timezone=True)),
        sa.Column("dispute_resolved_by", postgresql.UUID(as_uuid=True)),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_by", postgresql.UUID(as_uuid=True)),
        sa.Column("admin_cancelled", sa.Boolean, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== HOST PAYOUT PROFILES ====================
    op.create_table(
        "host_payout_profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("host_id", postgresql.UUID(as_uuid=True), unique=True, nullable=False, index=True),
        sa.Column("payout_method", sa.String(20)),
        sa.Column("account_holder_name", sa.String(200)),
        sa.Column("bank_name", sa.String(100)),
        sa.Column("account_number_encrypted", sa.LargeBinary),
        sa.Column("ifsc_code", sa.String(11)),
        sa.Column("upi_id", sa.String(100)),
        sa.Column("wallet_id", sa.String(100)),
        sa.Column("auto_withdraw", sa.Boolean, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # ==================== PAYOUTS ====================
    op.create_table(
        "payouts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("host_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id"), nullable=False, index=True),
        sa.Column("booking_reference", sa.String(20), nullable=False),
        sa.Column("period_start", sa.Date, nullable=False),
        sa.Column("period_end", sa.Date, nullable=False),
        sa.Column("total_booking_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("commission_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("gst_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("tcs_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("platform_fee_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("penalties", sa.Numeric(12, 2), server_default="0"),
        sa.Column("total_deductions", sa.Numeric(12, 2), nullable=False),
        sa.Column("net_payout", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), server_default="INR"),
        sa.Column("settings_version", sa.Integer),
        sa.Column("payout_method", sa.String(20), nullable=False),
        sa.Column("bank_name", sa.String(100)),
        sa.Column("account_number_encrypted", sa.LargeBinary),
        sa.Column("account_number_last4", sa.String(4)),
        sa.Column("ifsc_code", sa.String(11)),
        sa.Column("account_holder_name", sa.String(200)),
        sa.Column("upi_id", sa.String(100)),
        sa.Column("wallet_id", sa.String(100)),
        sa.Column("status", sa.String(20), server_default="pending", index=True),
        sa.Column("transaction_id", sa.String(100), unique=True),
        sa.Column("failure_reason", sa.Text),
        sa.Column("notes", sa.Text),
        sa.Column("retry_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_retry_at", sa.DateTime(timezone=True)),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("processed_by", postgresql.UUID(as_uuid=True)),
        sa.Column("processed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("host_id", "booking_id", name="uq_payouts_host_booking"),
    )

    op.create_table(
        "payout_adjustments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("payout_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("payouts.id"), nullable=False, index=True),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("host_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("source_reference", sa.String(100), nullable=False),
        sa.Column("reason", sa.Text),
        sa.Column("status", sa.String(20), server_default="open"),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("payout_id", "source", "source_reference", name="uq_payout_adjustment_source"),
    )

    # ==================== ADMIN ====================
    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("resource_type", sa.String(50), nullable=False, index=True),
        sa.Column("resource_id", postgresql.UUID(as_uuid=True)),
        sa.Column("old_values", sa.JSON),
        sa.Column("new_values", sa.JSON),
        sa.Column("ip_address", sa.String(45)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), index=True),
    )

    op.create_table(
        "disputes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("bookings.id"), nullable=False, index=True),
        sa.Column("raised_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), server_default="pending", index=True),
        sa.Column("resolution", sa.Text),
        sa.Column("refund_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("resolved_by", postgresql.UUID(as_uuid=True)),
        sa.Column("resolved_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.drop_table("disputes")
    op.drop_table("audit_logs")
    op.drop_table("payout_adjustments")
    op.drop_table("payouts")
    op.drop_table("host_payout_profiles")
    op.drop_table("bookings")
    op.drop_table("rate_settings")
