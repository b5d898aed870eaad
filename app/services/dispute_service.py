"""Dispute service.

Resolving a dispute with a refund amount drives the same refund approval
as the refund workflow, so both leave the booking in the same state.
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.database import utcnow
from app.domain.dispute_state import (
    DISPUTE_TRANSITIONS,
    assert_dispute_transition,
    dispute_target_for,
)
from app.domain.financials import validate_amounts
from app.models.admin import DisputeCase
from app.services.audit_service import audit_service
from app.services.booking_service import booking_service
from app.services.refund_service import refund_service

logger = logging.getLogger(__name__)

DISPUTE_CATEGORIES = ("booking_dispute", "refund_request", "host_complaint", "user_complaint")


class DisputeService:
    """Service for the dispute lifecycle."""

    async def open_dispute(
        self,
        db: AsyncSession,
        booking_id: UUID,
        raised_by: UUID,
        category: str,
        description: str,
    ) -> DisputeCase:
        """Open a dispute and mark the booking as disputed."""
        if category not in DISPUTE_CATEGORIES:
            raise ValidationError(f"Invalid dispute category: {category}")

        booking = await booking_service.get_booking(db, booking_id)
        assert_dispute_transition(booking.dispute_status, "pending")

        dispute = DisputeCase(
            booking_id=booking.id,
            raised_by=raised_by,
            category=category,
            description=description,
            status="pending",
        )
        db.add(dispute)

        booking.dispute_status = "pending"
        booking.dispute_reason = description
        booking.dispute_raised_at = utcnow()
        await db.flush()

        await audit_service.log_status_change(
            db, raised_by, "dispute_open", "dispute", dispute.id, None, "pending",
            booking_id=booking.id, category=category,
        )
        logger.info(f"Dispute {dispute.id} opened on booking {booking.booking_reference}")
        return dispute

    async def resolve_dispute(
        self,
        db: AsyncSession,
        dispute_id: UUID,
        action: str,
        actor_id: UUID,
        resolution: str,
        refund_amount: Any = None,
    ) -> DisputeCase:
        """Resolve or reject a pending dispute.

        Args:
            db: Database session
            dispute_id: Dispute to decide
            action: ``resolve`` or ``reject``
            actor_id: Admin deciding
            resolution: Decision text stored on the dispute and booking
            refund_amount: Optional refund granted with a resolution

        Raises:
            InvalidAction: Unknown action
            AlreadyProcessed: The dispute was already resolved or rejected
            ValidationError: A refund amount given with a rejection, or on an unpaid booking
            InvalidStatusTransition: The booking refund cannot be approved
            InvalidAmount: The refund exceeds the booking total
        """
        target = dispute_target_for(action)
        refund = validate_amounts(refund_amount=refund_amount)["refund_amount"]
        if target == "rejected" and refund > 0:
            raise ValidationError("A rejected dispute cannot grant a refund")

        dispute = await self.get_dispute(db, dispute_id)
        old_status = dispute.status
        assert_dispute_transition(old_status, target)

        booking = await booking_service.get_booking(db, dispute.booking_id)
        if refund > 0:
            refund_service.check_approvable(booking, refund)
        now = utcnow()

        dispute.status = target
        dispute.resolution = resolution
        dispute.refund_amount = refund
        dispute.resolved_by = actor_id
        dispute.resolved_at = now

        booking.dispute_status = target
        booking.dispute_resolution = resolution
        booking.dispute_resolved_at = now
        booking.dispute_resolved_by = actor_id

        await audit_service.log_status_change(
            db, actor_id, f"dispute_{action}", "dispute", dispute.id, old_status, target,
            booking_id=booking.id, refund_amount=refund,
        )
        logger.info(f"Dispute {dispute.id} {old_status} -> {target} by {actor_id}")

        if refund > 0:
            await refund_service.decide_refund(
                db,
                booking.id,
                "approve",
                actor_id,
                amount=refund,
                reason=f"Dispute resolution: {resolution}",
            )
        return dispute

    async def get_dispute(self, db: AsyncSession, dispute_id: UUID) -> DisputeCase:
        """Get dispute by ID or raise NotFoundError."""
        result = await db.execute(select(DisputeCase).where(DisputeCase.id == dispute_id))
        dispute = result.scalar_one_or_none()
        if not dispute:
            raise NotFoundError("Dispute", str(dispute_id))
        return dispute

    async def list_disputes(
        self,
        db: AsyncSession,
        status: str | None = None,
        booking_id: UUID | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[DisputeCase], int]:
        query = select(DisputeCase)
        if status:
            if status not in DISPUTE_TRANSITIONS:
                raise ValidationError(f"Unknown dispute status: {status}")
            query = query.where(DisputeCase.status == status)
        if booking_id:
            query = query.where(DisputeCase.booking_id == booking_id)

        total = await db.scalar(select(func.count()).select_from(query.subquery()))
        result = await db.execute(
            query.order_by(DisputeCase.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total or 0


dispute_service = DisputeService()
