"""Rate settings model.

Each administrative update writes a new version; the highest version is
the one calculations read. Versions are never modified after creation.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base, utcnow


class RateSettings(Base):
    """Commission, GST, TCS and platform-fee policy version."""

    __tablename__ = "rate_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    version: Mapped[int] = mapped_column(Integer, unique=True, nullable=False, index=True)

    # Commission
    commission_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    commission_type: Mapped[str] = mapped_column(
        String(20), default="percentage", nullable=False
    )  # percentage, fixed
    fixed_commission_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    commission_on_cleaning_fee: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    commission_on_extra_guests: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # GST
    gst_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    gst_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    gst_number: Mapped[str | None] = mapped_column(String(20))
    gst_on_commission: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    gst_inclusive: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # TCS
    tcs_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    tcs_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    tcs_threshold: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Platform fee
    platform_fee_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    platform_fee_type: Mapped[str] = mapped_column(
        String(20), default="percentage", nullable=False
    )  # percentage, fixed
    platform_fee_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    fixed_platform_fee: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    # Version metadata
    change_note: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)  # None for bootstrap seed
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
