"""Booking ledger model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.admin import DisputeCase
    from app.models.payout import PayoutRecord


class Booking(Base):
    """Agreed price, cached financial breakdown and status of one booking.

    Bookings are never deleted once paid; cancellation and refund are
    status transitions.
    """

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_reference: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # HS-XXXXXX

    # Parties (owned by the identity and listing services)
    host_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    guest_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    stay_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Dates
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guests: Mapped[int] = mapped_column(Integer, default=1)

    # Pricing (INR)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    extra_guest_charge: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    penalties: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0")
    )  # host penalties deducted at settlement
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )  # post-discount amount actually charged
    currency: Mapped[str] = mapped_column(String(3), default="INR")

    # Cached financial breakdown (computed on demand)
    commission_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    gst_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    tcs_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    platform_fee_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    total_deductions: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    net_payout: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    financials_excluded_addons: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    financials_total_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    financials_settings_version: Mapped[int | None] = mapped_column(Integer)
    financials_computed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Status
    payment_status: Mapped[str] = mapped_column(
        String(20), default="pending", index=True
    )  # pending, paid, refunded, failed
    booking_status: Mapped[str] = mapped_column(
        String(20), default="upcoming", index=True
    )  # upcoming, ongoing, completed, cancelled

    # Refund: none → pending → approved → processed, or rejected
    refund_status: Mapped[str] = mapped_column(String(20), default="none")
    refund_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    refund_reason: Mapped[str | None] = mapped_column(Text)
    refund_requested_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    refund_decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    refund_decided_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    refund_processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    refund_gateway_reference: Mapped[str | None] = mapped_column(String(100))

    # Dispute: none → pending → resolved | rejected
    dispute_status: Mapped[str] = mapped_column(String(20), default="none")
    dispute_reason: Mapped[str | None] = mapped_column(Text)
    dispute_raised_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    dispute_resolution: Mapped[str | None] = mapped_column(Text)
    dispute_resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    dispute_resolved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)

    # Cancellation
    cancellation_reason: Mapped[str | None] = mapped_column(Text)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    admin_cancelled: Mapped[bool] = mapped_column(Boolean, default=False)

    # Timestamps
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    payouts: Mapped[list["PayoutRecord"]] = relationship(
        "PayoutRecord", back_populates="booking", lazy="raise"
    )
    disputes: Mapped[list["DisputeCase"]] = relationship(
        "DisputeCase", back_populates="booking", lazy="raise"
    )

    @property
    def nights(self) -> int:
        """Calculate number of nights."""
        return (self.check_out - self.check_in).days

    @property
    def has_cached_financials(self) -> bool:
        """Whether a breakdown has been computed and stored."""
        return self.net_payout is not None and self.financials_total_amount is not None
