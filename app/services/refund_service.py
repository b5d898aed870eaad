"""Refund workflow service.

Refund: none → pending → approved → processed, none | pending → rejected.
``approved`` stays visible until the gateway confirms the refund.

A refund never changes a generated payout. When the booking already has
a payout, a compensating adjustment is appended instead.
"""

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidAmount, ValidationError
from app.database import utcnow
from app.domain.dispute_state import assert_refund_transition, refund_target_for
from app.domain.financials import validate_amounts
from app.domain.payment_state import assert_payment_transition
from app.models.booking import Booking
from app.services.audit_service import audit_service
from app.services.booking_service import booking_service
from app.services.payout_service import payout_service

logger = logging.getLogger(__name__)


def _validated_refund_amount(booking: Booking, amount: Any) -> Decimal:
    """Refund must satisfy 0 < amount <= total charged."""
    refund = validate_amounts(refund_amount=amount)["refund_amount"]
    if refund <= 0 or refund > booking.total_amount:
        raise InvalidAmount("refund_amount", amount)
    return refund


class RefundService:
    """Service for refund requests, decisions and gateway confirmation."""

    def check_approvable(self, booking: Booking, amount: Any) -> Decimal:
        """Validate that a refund of ``amount`` can be approved on the booking.

        Changes nothing; callers run it before mutating related records.

        Raises:
            AlreadyProcessed: If the refund has already been processed
            InvalidStatusTransition: If approval is not allowed from the current state
            ValidationError: If the booking is not paid
            InvalidAmount: If the amount is not within (0, total_amount]
        """
        assert_refund_transition(booking.refund_status, "approved")
        if booking.payment_status != "paid":
            raise ValidationError(
                f"Refunds require a paid booking; payment status is {booking.payment_status}"
            )
        return _validated_refund_amount(booking, amount)

    async def request_refund(
        self,
        db: AsyncSession,
        booking_id: UUID,
        amount: Any,
        reason: str,
        actor_id: UUID,
    ) -> Booking:
        """Open a pending refund on a paid booking."""
        booking = await booking_service.get_booking(db, booking_id)
        if booking.payment_status != "paid":
            raise ValidationError(
                f"Refunds require a paid booking; payment status is {booking.payment_status}"
            )
        assert_refund_transition(booking.refund_status, "pending")
        refund = _validated_refund_amount(booking, amount)

        old_status = booking.refund_status
        booking.refund_status = "pending"
        booking.refund_amount = refund
        booking.refund_reason = reason
        booking.refund_requested_at = utcnow()
        booking.refund_decided_at = None
        booking.refund_decided_by = None

        await audit_service.log_status_change(
            db, actor_id, "refund_request", "booking", booking.id, old_status, "pending",
            amount=refund, reason=reason,
        )
        logger.info(f"Refund of {refund} requested on booking {booking.booking_reference}")
        return booking

    async def decide_refund(
        self,
        db: AsyncSession,
        booking_id: UUID,
        action: str,
        actor_id: UUID,
        amount: Any = None,
        reason: str | None = None,
    ) -> Booking:
        """Approve or reject a refund.

        Approval defaults the amount to the requested amount, or the full
        total when nothing was requested.

        Raises:
            InvalidAction: If action is not approve or reject
            AlreadyProcessed: If the refund has already been processed
            InvalidStatusTransition: If the decision is not allowed from the current state
            InvalidAmount: If the amount is not within (0, total_amount]
        """
        target = refund_target_for(action)
        booking = await booking_service.get_booking(db, booking_id)
        old_status = booking.refund_status

        if target == "approved":
            if amount is None:
                amount = booking.refund_amount if booking.refund_amount else booking.total_amount
            booking.refund_amount = self.check_approvable(booking, amount)
        else:
            assert_refund_transition(old_status, target)

        booking.refund_status = target
        if reason:
            booking.refund_reason = reason
        booking.refund_decided_at = utcnow()
        booking.refund_decided_by = actor_id

        await audit_service.log_status_change(
            db,
            actor_id,
            f"refund_{action}",
            "booking",
            booking.id,
            old_status,
            target,
            amount=booking.refund_amount,
            reason=booking.refund_reason,
        )
        logger.info(
            f"Refund on booking {booking.booking_reference} {old_status} -> {target} "
            f"by {actor_id} (amount {booking.refund_amount})"
        )

        if target == "approved":
            await payout_service.record_refund_adjustment(db, booking, actor_id)
        return booking

    async def confirm_refund(
        self,
        db: AsyncSession,
        booking_id: UUID,
        actor_id: UUID,
        gateway_reference: str,
    ) -> Booking:
        """Mark an approved refund as processed once the gateway confirms it."""
        if not gateway_reference or not gateway_reference.strip():
            raise ValidationError("gateway_reference is required to confirm a refund")

        booking = await booking_service.get_booking(db, booking_id)
        old_status = booking.refund_status
        assert_refund_transition(old_status, "processed")

        booking.refund_status = "processed"
        booking.refund_processed_at = utcnow()
        booking.refund_gateway_reference = gateway_reference.strip()

        old_payment_status = booking.payment_status
        if booking.refund_amount >= booking.total_amount:
            assert_payment_transition(old_payment_status, "refunded")
            booking.payment_status = "refunded"

        await audit_service.log_status_change(
            db,
            actor_id,
            "refund_confirm",
            "booking",
            booking.id,
            old_status,
            "processed",
            amount=booking.refund_amount,
            gateway_reference=booking.refund_gateway_reference,
            payment_status=booking.payment_status,
        )
        logger.info(
            f"Refund on booking {booking.booking_reference} processed "
            f"(payment {old_payment_status} -> {booking.payment_status})"
        )

        # A payout may have been generated between approval and confirmation
        await payout_service.record_refund_adjustment(db, booking, actor_id)
        return booking


refund_service = RefundService()
