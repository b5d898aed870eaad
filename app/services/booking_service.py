"""Booking status management for the settlement ledger."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.database import utcnow
from app.domain.booking_state import (
    BOOKING_TRANSITIONS,
    assert_booking_transition,
    normalize_booking_status,
)
from app.domain.payment_state import PAYMENT_TRANSITIONS, assert_payment_transition
from app.models.booking import Booking
from app.services.audit_service import audit_service

logger = logging.getLogger(__name__)


class BookingService:
    """Service for booking lookups and status transitions."""

    async def get_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        """Get booking by ID or raise NotFoundError."""
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        host_id: UUID | None = None,
        booking_status: str | None = None,
        payment_status: str | None = None,
        refund_status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        query = select(Booking)
        if host_id:
            query = query.where(Booking.host_id == host_id)
        if booking_status:
            query = query.where(Booking.booking_status == normalize_booking_status(booking_status))
        if payment_status:
            query = query.where(Booking.payment_status == payment_status)
        if refund_status:
            query = query.where(Booking.refund_status == refund_status)

        total = await db.scalar(select(func.count()).select_from(query.subquery()))
        result = await db.execute(
            query.order_by(Booking.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total or 0

    async def update_booking_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        new_status: str,
        actor_id: UUID,
    ) -> Booking:
        """Move a booking along its lifecycle (cancellation has its own operation)."""
        if new_status not in BOOKING_TRANSITIONS:
            raise ValidationError(f"Unknown booking status: {new_status}")
        if new_status == "cancelled":
            raise ValidationError("Use the cancel operation to cancel a booking")

        booking = await self.get_booking(db, booking_id)
        old_status = normalize_booking_status(booking.booking_status)
        assert_booking_transition(old_status, new_status)

        booking.booking_status = new_status
        if new_status == "completed":
            booking.completed_at = utcnow()

        await audit_service.log_status_change(
            db, actor_id, "booking_status_update", "booking", booking.id, old_status, new_status
        )
        logger.info(f"Booking {booking.booking_reference} {old_status} -> {new_status}")
        return booking

    async def update_payment_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        new_status: str,
        actor_id: UUID,
    ) -> Booking:
        """Record a payment status change reported by the payment gateway."""
        if new_status not in PAYMENT_TRANSITIONS:
            raise ValidationError(f"Unknown payment status: {new_status}")
        if new_status == "refunded":
            raise ValidationError("Payments become refunded only by confirming a refund")

        booking = await self.get_booking(db, booking_id)
        old_status = booking.payment_status
        assert_payment_transition(old_status, new_status)
        booking.payment_status = new_status

        await audit_service.log_status_change(
            db, actor_id, "payment_status_update", "booking", booking.id, old_status, new_status
        )
        logger.info(f"Booking {booking.booking_reference} payment {old_status} -> {new_status}")
        return booking

    async def admin_cancel_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        reason: str,
        actor_id: UUID,
        refund_amount: Decimal | None = None,
    ) -> Booking:
        """Cancel a booking on behalf of the platform, optionally opening a refund.

        Raises:
            InvalidStatusTransition: If the booking is already cancelled or completed
        """
        from app.services.refund_service import refund_service

        booking = await self.get_booking(db, booking_id)
        old_status = normalize_booking_status(booking.booking_status)
        assert_booking_transition(old_status, "cancelled")

        booking.booking_status = "cancelled"
        booking.cancellation_reason = reason
        booking.cancelled_at = utcnow()
        booking.cancelled_by = actor_id
        booking.admin_cancelled = True

        await audit_service.log_status_change(
            db,
            actor_id,
            "booking_cancel",
            "booking",
            booking.id,
            old_status,
            "cancelled",
            reason=reason,
            refund_amount=refund_amount,
        )
        logger.info(f"Booking {booking.booking_reference} cancelled by admin {actor_id}")

        if refund_amount:
            await refund_service.request_refund(
                db, booking.id, refund_amount, f"Admin cancellation: {reason}", actor_id
            )
        return booking


booking_service = BookingService()
