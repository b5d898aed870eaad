"""Admin-related database models."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.booking import Booking


class AuditLog(Base):
    """Audit log for tracking financial actions (append-only)."""

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    actor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Action details
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    resource_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)

    # Changes
    old_values: Mapped[dict | None] = mapped_column(JSON)
    new_values: Mapped[dict | None] = mapped_column(JSON)

    # Request info
    ip_address: Mapped[str | None] = mapped_column(String(45))

    # Timestamp
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )


class DisputeCase(Base):
    """Dispute raised against a booking."""

    __tablename__ = "disputes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id"), nullable=False, index=True
    )
    raised_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Details
    category: Mapped[str] = mapped_column(
        String(30), nullable=False
    )  # booking_dispute, refund_request, host_complaint, user_complaint
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Status: pending → resolved | rejected
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)

    # Resolution
    resolution: Mapped[str | None] = mapped_column(Text)
    refund_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="disputes", lazy="raise")
