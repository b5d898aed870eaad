"""Seed default rate settings.

Revision ID: 002_seed_rate_settings
Revises: 001_initial
Create Date: 2026-10-19

Inserts settings version 1 from the configured defaults, the same values
the application bootstrap uses when the table is empty.
"""

import uuid
from typing import Sequence

from alembic import op
from sqlalchemy import Boolean, Integer, Numeric, String, Text, column, table
from sqlalchemy.dialects.postgresql import UUID

from app.domain.rate_policy import validate_rate_values
from app.services.rate_settings_service import default_rate_values

# revision identifiers
revision: str = "002_seed_rate_settings"
down_revision: str = "001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Insert settings version 1."""
    rate_settings_table = table(
        "rate_settings",
        column("id", UUID(as_uuid=True)),
        column("version", Integer),
        column("commission_rate", Numeric),
        column("commission_type", String),
        column("fixed_commission_amount", Numeric),
        column("commission_on_cleaning_fee", Boolean),
        column("commission_on_extra_guests", Boolean),
        column("gst_enabled", Boolean),
        column("gst_rate", Numeric),
        column("gst_number", String),
        column("gst_on_commission", Boolean),
        column("gst_inclusive", Boolean),
        column("tcs_enabled", Boolean),
        column("tcs_rate", Numeric),
        column("tcs_threshold", Numeric),
        column("platform_fee_enabled", Boolean),
        column("platform_fee_type", String),
        column("platform_fee_rate", Numeric),
        column("fixed_platform_fee", Numeric),
        column("change_note", Text),
    )

    values = validate_rate_values(default_rate_values())
    op.bulk_insert(
        rate_settings_table,
        [{"id": uuid.uuid4(), "version": 1, "change_note": "Default settings", **values}],
    )


def downgrade() -> None:
    """Remove the seeded version."""
    rate_settings_table = table("rate_settings", column("version", Integer))
    op.execute(rate_settings_table.delete().where(rate_settings_table.c.version == 1))
