"""Booking lifecycle, refunds, disputes and their effect on payouts."""

from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import (
    AlreadyProcessed,
    InvalidAction,
    InvalidAmount,
    InvalidStatusTransition,
    ValidationError,
)
from app.services.booking_service import booking_service
from app.services.dispute_service import dispute_service
from app.services.payout_service import payout_service
from app.services.refund_service import refund_service


async def generate(db, host_id, admin_id):
    result = await payout_service.generate_payouts(
        db, host_id, date(2026, 9, 1), date(2026, 9, 30), actor_id=admin_id
    )
    await db.commit()
    return result.payouts[0]


# ============ BOOKING LIFECYCLE ============


async def test_booking_moves_through_its_lifecycle(db, make_booking, admin_id):
    booking = await make_booking(booking_status="upcoming")

    await booking_service.update_booking_status(db, booking.id, "ongoing", actor_id=admin_id)
    completed = await booking_service.update_booking_status(
        db, booking.id, "completed", actor_id=admin_id
    )

    assert completed.booking_status == "completed"
    assert completed.completed_at is not None

    with pytest.raises(InvalidStatusTransition):
        await booking_service.update_booking_status(db, booking.id, "ongoing", actor_id=admin_id)


async def test_cancellation_has_its_own_operation(db, make_booking, admin_id):
    booking = await make_booking(booking_status="upcoming")

    with pytest.raises(ValidationError):
        await booking_service.update_booking_status(
            db, booking.id, "cancelled", actor_id=admin_id
        )


async def test_payment_cannot_be_marked_refunded_directly(db, make_booking, admin_id):
    booking = await make_booking()

    with pytest.raises(ValidationError):
        await booking_service.update_payment_status(db, booking.id, "refunded", actor_id=admin_id)


async def test_admin_cancel_opens_a_refund(db, make_booking, admin_id):
    booking = await make_booking(booking_status="upcoming")

    cancelled = await booking_service.admin_cancel_booking(
        db,
        booking.id,
        reason="Property unavailable",
        actor_id=admin_id,
        refund_amount=Decimal("10000"),
    )

    assert cancelled.booking_status == "cancelled"
    assert cancelled.admin_cancelled is True
    assert cancelled.cancelled_by == admin_id
    assert cancelled.refund_status == "pending"
    assert cancelled.refund_amount == Decimal("10000.00")


async def test_completed_booking_cannot_be_cancelled(db, make_booking, admin_id):
    booking = await make_booking()

    with pytest.raises(InvalidStatusTransition):
        await booking_service.admin_cancel_booking(
            db, booking.id, reason="Too late", actor_id=admin_id
        )


# ============ REFUNDS ============


async def test_refund_request_validates_amount(db, make_booking, admin_id):
    booking = await make_booking()

    with pytest.raises(InvalidAmount):
        await refund_service.request_refund(
            db, booking.id, Decimal("10000.01"), reason="Overcharged", actor_id=admin_id
        )
    with pytest.raises(InvalidAmount):
        await refund_service.request_refund(
            db, booking.id, Decimal("0"), reason="Overcharged", actor_id=admin_id
        )


async def test_refund_requires_paid_booking(db, make_booking, admin_id):
    booking = await make_booking(payment_status="pending", booking_status="upcoming")

    with pytest.raises(ValidationError):
        await refund_service.request_refund(
            db, booking.id, Decimal("100"), reason="Changed plans", actor_id=admin_id
        )


async def test_full_refund_flow_marks_payment_refunded(db, make_booking, admin_id):
    booking = await make_booking()

    await refund_service.request_refund(
        db, booking.id, Decimal("10000"), reason="Flooded property", actor_id=admin_id
    )
    approved = await refund_service.decide_refund(db, booking.id, "approve", actor_id=admin_id)
    assert approved.refund_status == "approved"
    assert approved.refund_amount == Decimal("10000.00")
    assert approved.refund_decided_by == admin_id
    # Approval is not the gateway confirmation
    assert approved.payment_status == "paid"

    processed = await refund_service.confirm_refund(
        db, booking.id, actor_id=admin_id, gateway_reference="rfnd_123"
    )
    assert processed.refund_status == "processed"
    assert processed.payment_status == "refunded"
    assert processed.refund_gateway_reference == "rfnd_123"

    with pytest.raises(AlreadyProcessed):
        await refund_service.confirm_refund(
            db, booking.id, actor_id=admin_id, gateway_reference="rfnd_123"
        )


async def test_partial_refund_keeps_payment_paid(db, make_booking, admin_id):
    booking = await make_booking()

    await refund_service.request_refund(
        db, booking.id, Decimal("2500"), reason="Pool closed", actor_id=admin_id
    )
    await refund_service.decide_refund(db, booking.id, "approve", actor_id=admin_id)
    processed = await refund_service.confirm_refund(
        db, booking.id, actor_id=admin_id, gateway_reference="rfnd_456"
    )

    assert processed.payment_status == "paid"
    assert processed.refund_amount == Decimal("2500.00")


async def test_rejected_refund_cannot_be_approved_without_a_new_request(
    db, make_booking, admin_id
):
    booking = await make_booking()
    await refund_service.request_refund(
        db, booking.id, Decimal("500"), reason="Noise", actor_id=admin_id
    )
    rejected = await refund_service.decide_refund(
        db, booking.id, "reject", actor_id=admin_id, reason="Not covered"
    )
    assert rejected.refund_status == "rejected"

    with pytest.raises(InvalidStatusTransition):
        await refund_service.decide_refund(db, booking.id, "approve", actor_id=admin_id)
    with pytest.raises(InvalidAction):
        await refund_service.decide_refund(db, booking.id, "refund", actor_id=admin_id)


async def test_refund_after_payout_adds_one_compensating_adjustment(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    booking = await make_booking()
    payout = await generate(db, host_id, admin_id)

    await refund_service.request_refund(
        db, booking.id, Decimal("3000"), reason="Early checkout", actor_id=admin_id
    )
    await refund_service.decide_refund(db, booking.id, "approve", actor_id=admin_id)
    await refund_service.confirm_refund(
        db, booking.id, actor_id=admin_id, gateway_reference="rfnd_789"
    )
    await db.commit()

    adjustments = await payout_service.list_adjustments(db, payout_id=payout.id)
    assert len(adjustments) == 1
    assert adjustments[0].amount == Decimal("-3000.00")
    assert adjustments[0].source == "refund"
    assert adjustments[0].status == "open"

    unchanged = await payout_service.get_payout(db, payout.id, refresh=True)
    assert unchanged.net_payout == Decimal("9000.00")
    assert unchanged.status == "pending"

    summary = await payout_service.host_payout_summary(db, host_id)
    assert summary["total_adjustments"] == Decimal("-3000.00")


async def test_adjustment_is_capped_at_the_net_payout(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    booking = await make_booking()
    payout = await generate(db, host_id, admin_id)

    await refund_service.decide_refund(
        db, booking.id, "approve", actor_id=admin_id, amount=Decimal("10000")
    )

    adjustments = await payout_service.list_adjustments(db, payout_id=payout.id)
    assert adjustments[0].amount == Decimal("-9000.00")


# ============ DISPUTES ============


async def test_dispute_resolution_with_refund_drives_booking_refund(
    db, make_booking, admin_id
):
    booking = await make_booking()
    guest_id = booking.guest_id

    dispute = await dispute_service.open_dispute(
        db, booking.id, raised_by=guest_id, category="booking_dispute",
        description="Room did not match listing",
    )
    assert dispute.status == "pending"
    assert booking.dispute_status == "pending"

    resolved = await dispute_service.resolve_dispute(
        db, dispute.id, "resolve", actor_id=admin_id,
        resolution="Partial refund granted", refund_amount=Decimal("1500"),
    )

    assert resolved.status == "resolved"
    assert resolved.resolved_by == admin_id
    assert booking.dispute_status == "resolved"
    assert booking.refund_status == "approved"
    assert booking.refund_amount == Decimal("1500.00")
    assert booking.refund_reason.startswith("Dispute resolution")

    with pytest.raises(AlreadyProcessed):
        await dispute_service.resolve_dispute(
            db, dispute.id, "reject", actor_id=admin_id, resolution="Changed mind"
        )


async def test_rejected_dispute_cannot_grant_refund(db, make_booking, admin_id):
    booking = await make_booking()
    dispute = await dispute_service.open_dispute(
        db, booking.id, raised_by=booking.guest_id, category="host_complaint",
        description="Host was rude",
    )

    with pytest.raises(ValidationError):
        await dispute_service.resolve_dispute(
            db, dispute.id, "reject", actor_id=admin_id,
            resolution="No evidence", refund_amount=Decimal("100"),
        )

    rejected = await dispute_service.resolve_dispute(
        db, dispute.id, "reject", actor_id=admin_id, resolution="No evidence"
    )
    assert rejected.status == "rejected"
    assert booking.refund_status == "none"


async def test_only_one_open_dispute_per_booking(db, make_booking):
    booking = await make_booking()
    await dispute_service.open_dispute(
        db, booking.id, raised_by=booking.guest_id, category="booking_dispute",
        description="Wrong dates",
    )

    with pytest.raises(InvalidStatusTransition):
        await dispute_service.open_dispute(
            db, booking.id, raised_by=booking.guest_id, category="booking_dispute",
            description="Wrong dates again",
        )


async def test_dispute_category_validated(db, make_booking):
    booking = await make_booking()

    with pytest.raises(ValidationError):
        await dispute_service.open_dispute(
            db, booking.id, raised_by=booking.guest_id, category="other",
            description="Something",
        )


async def test_dispute_refund_on_unpaid_booking_leaves_dispute_open(
    db, make_booking, admin_id
):
    booking = await make_booking(payment_status="pending", booking_status="upcoming")
    dispute = await dispute_service.open_dispute(
        db, booking.id, raised_by=booking.guest_id, category="booking_dispute",
        description="Charged twice",
    )

    with pytest.raises(ValidationError):
        await dispute_service.resolve_dispute(
            db, dispute.id, "resolve", actor_id=admin_id,
            resolution="Refund granted", refund_amount=Decimal("500"),
        )

    assert dispute.status == "pending"
    assert dispute.resolved_by is None
    assert booking.dispute_status == "pending"
    assert booking.dispute_resolution is None
    assert booking.refund_status == "none"


async def test_dispute_refund_on_approved_refund_leaves_dispute_open(
    db, make_booking, admin_id
):
    booking = await make_booking(refund_status="approved", refund_amount=Decimal("1000.00"))
    dispute = await dispute_service.open_dispute(
        db, booking.id, raised_by=booking.guest_id, category="booking_dispute",
        description="Refund too small",
    )

    with pytest.raises(InvalidStatusTransition):
        await dispute_service.resolve_dispute(
            db, dispute.id, "resolve", actor_id=admin_id,
            resolution="Top-up refund", refund_amount=Decimal("500"),
        )

    assert dispute.status == "pending"
    assert booking.dispute_status == "pending"
    assert booking.refund_amount == Decimal("1000.00")

    resolved = await dispute_service.resolve_dispute(
        db, dispute.id, "resolve", actor_id=admin_id, resolution="Existing refund stands"
    )
    assert resolved.status == "resolved"


async def test_dispute_refund_above_total_leaves_dispute_open(db, make_booking, admin_id):
    booking = await make_booking()
    dispute = await dispute_service.open_dispute(
        db, booking.id, raised_by=booking.guest_id, category="booking_dispute",
        description="Wants more back",
    )

    with pytest.raises(InvalidAmount):
        await dispute_service.resolve_dispute(
            db, dispute.id, "resolve", actor_id=admin_id,
            resolution="Refund granted", refund_amount=Decimal("10000.01"),
        )

    assert dispute.status == "pending"
    assert booking.dispute_status == "pending"
