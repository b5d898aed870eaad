"""Payout-related database models."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.booking import Booking


class PayoutRecord(Base):
    """Settlement of one booking to its host.

    At most one record exists per (host, booking); the database constraint
    is authoritative, generation pre-checks only to report skips.
    """

    __tablename__ = "payouts"
    __table_args__ = (
        UniqueConstraint("host_id", "booking_id", name="uq_payouts_host_booking"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    host_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id"), nullable=False, index=True
    )
    booking_reference: Mapped[str] = mapped_column(String(20), nullable=False)

    # Generation period
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)

    # Amounts snapshot (INR)
    total_booking_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    gst_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tcs_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    platform_fee_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    penalties: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_payout: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR")
    settings_version: Mapped[int | None] = mapped_column(Integer)

    # Destination
    payout_method: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # bank_transfer, upi, wallet
    bank_name: Mapped[str | None] = mapped_column(String(100))
    account_number_encrypted: Mapped[bytes | None] = mapped_column(LargeBinary)
    account_number_last4: Mapped[str | None] = mapped_column(String(4))
    ifsc_code: Mapped[str | None] = mapped_column(String(11))
    account_holder_name: Mapped[str | None] = mapped_column(String(200))
    upi_id: Mapped[str | None] = mapped_column(String(100))
    wallet_id: Mapped[str | None] = mapped_column(String(100))

    # Status (state machine: pending → processing → completed | failed | cancelled)
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    transaction_id: Mapped[str | None] = mapped_column(String(100), unique=True)
    failure_reason: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    retry_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_retry_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Actors
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    processed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)

    # Timestamps
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="payouts", lazy="raise")
    adjustments: Mapped[list["PayoutAdjustment"]] = relationship(
        "PayoutAdjustment", back_populates="payout", lazy="raise"
    )


class PayoutAdjustment(Base):
    """Compensating entry against an existing payout (append-only).

    Created when a refund lands on a booking that already has a payout;
    the payout record itself is never rewritten.
    """

    __tablename__ = "payout_adjustments"
    __table_args__ = (
        UniqueConstraint("payout_id", "source", "source_reference", name="uq_payout_adjustment_source"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    payout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("payouts.id"), nullable=False, index=True
    )
    booking_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("bookings.id"), nullable=False)
    host_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)  # negative = owed back
    source: Mapped[str] = mapped_column(String(20), nullable=False)  # refund, dispute
    source_reference: Mapped[str] = mapped_column(String(100), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="open")  # open (awaiting reconciliation)

    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    payout: Mapped["PayoutRecord"] = relationship(
        "PayoutRecord", back_populates="adjustments", lazy="raise"
    )
