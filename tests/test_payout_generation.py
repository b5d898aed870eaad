"""Payout generation: eligibility, idempotency, destinations, batch failures."""

from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import InvalidRequestError

from app.core.exceptions import PayoutDestinationMissing, SettingsNotConfigured
from app.models.payout import PayoutAdjustment, PayoutRecord
from app.services.commission_service import commission_service
from app.services.payout_service import payout_service

PERIOD = (date(2026, 9, 1), date(2026, 9, 30))


async def payout_count(db) -> int:
    return await db.scalar(select(func.count(PayoutRecord.id)))


async def test_generates_pending_payouts_for_eligible_bookings(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    eligible = await make_booking()
    await make_booking(booking_status="upcoming")
    await make_booking(payment_status="pending")
    await make_booking(booking_status="cancelled", payment_status="refunded")
    await make_booking(created_at=datetime(2026, 10, 1, 0, 0, tzinfo=UTC))
    await make_booking(host_id=uuid4())

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    assert result.created_count == 1
    assert result.skipped_count == 0
    assert result.failed_count == 0

    payout = result.payouts[0]
    assert payout.booking_id == eligible.id
    assert payout.status == "pending"
    assert payout.total_booking_amount == Decimal("10000.00")
    assert payout.commission_amount == Decimal("1000.00")
    assert payout.net_payout == Decimal("9000.00")
    assert payout.settings_version == 1
    assert payout.payout_method == "bank_transfer"
    assert payout.account_number_last4 == "9012"
    assert payout.created_by == admin_id
    assert result.total_net_payout == Decimal("9000.00")


async def test_period_end_is_inclusive(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    await make_booking(created_at=datetime(2026, 9, 30, 23, 59, tzinfo=UTC))

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)

    assert result.created_count == 1


async def test_second_run_skips_every_booking(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    await make_booking()
    await make_booking()

    first = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()
    second = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    assert first.created_count == 2
    assert second.created_count == 0
    assert second.skipped_count == 2
    assert {item.reason for item in second.items} == {"payout_already_exists"}
    assert await payout_count(db) == 2


async def test_unique_constraint_catches_a_missed_precheck(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id, monkeypatch
):
    await make_payout_profile()
    await make_booking()
    await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    async def nothing_exists(db, host_id, booking_ids):
        return set()

    # A concurrent run that read before the first one committed
    monkeypatch.setattr(payout_service, "find_existing_payouts", nothing_exists)
    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    assert result.skipped_count == 1
    assert result.items[0].reason == "payout_already_exists"
    assert await payout_count(db) == 1


async def test_one_bad_booking_does_not_abort_the_batch(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    good = await make_booking(created_at=datetime(2026, 9, 2, tzinfo=UTC))
    bad = await make_booking(
        total_amount=Decimal("-50.00"), created_at=datetime(2026, 9, 3, tzinfo=UTC)
    )
    later = await make_booking(created_at=datetime(2026, 9, 4, tzinfo=UTC))

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    statuses = {item.booking_id: item.status for item in result.items}
    assert statuses == {good.id: "created", bad.id: "failed", later.id: "created"}
    failed = next(item for item in result.items if item.status == "failed")
    assert "total_amount" in failed.reason
    assert await payout_count(db) == 2


async def test_missing_destination_fails_loudly(
    db, rate_settings, make_booking, admin_id, host_id
):
    await make_booking()

    with pytest.raises(PayoutDestinationMissing):
        await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    assert await payout_count(db) == 0


async def test_incomplete_bank_details_are_not_a_destination(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile(ifsc_code=None)
    await make_booking()

    with pytest.raises(PayoutDestinationMissing):
        await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)


async def test_upi_preference_is_used(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile(payout_method="upi", upi_id="asha@okhdfc")
    await make_booking()

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)

    payout = result.payouts[0]
    assert payout.payout_method == "upi"
    assert payout.upi_id == "asha@okhdfc"
    assert payout.account_number_encrypted is None


async def test_requires_settings(db, make_booking, make_payout_profile, admin_id, host_id):
    await make_payout_profile()
    await make_booking()

    with pytest.raises(SettingsNotConfigured):
        await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)


async def test_cached_breakdown_wins_over_current_rates(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    await make_booking(
        commission_amount=Decimal("1500.00"),
        gst_amount=Decimal("0.00"),
        tcs_amount=Decimal("0.00"),
        platform_fee_amount=Decimal("0.00"),
        total_deductions=Decimal("1500.00"),
        net_payout=Decimal("8500.00"),
        financials_total_amount=Decimal("10000.00"),
        financials_settings_version=1,
    )

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)

    assert result.payouts[0].commission_amount == Decimal("1500.00")
    assert result.payouts[0].net_payout == Decimal("8500.00")


async def test_approved_refund_is_recorded_as_adjustment(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    booking = await make_booking(refund_status="approved", refund_amount=Decimal("2000.00"))

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    adjustments = await payout_service.list_adjustments(db, payout_id=result.payouts[0].id)
    assert len(adjustments) == 1
    assert adjustments[0].amount == Decimal("-2000.00")
    assert adjustments[0].booking_id == booking.id
    # The payout itself is never reduced
    assert result.payouts[0].net_payout == Decimal("9000.00")


async def test_statistics_and_summary(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    await make_booking()
    await make_booking()
    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()
    await payout_service.transition_payout(
        db, result.payouts[0].id, "process", actor_id=admin_id, transaction_id="UTR-1"
    )
    await db.commit()

    stats = await payout_service.payout_statistics(db, host_id=host_id)
    assert stats["total_count"] == 2
    assert stats["by_status"]["completed"]["count"] == 1
    assert stats["by_status"]["pending"]["amount"] == Decimal("9000.00")
    assert stats["outstanding_amount"] == Decimal("9000.00")

    summary = await payout_service.host_payout_summary(db, host_id)
    assert summary["payout_count"] == 2
    assert summary["total_paid"] == Decimal("9000.00")
    assert summary["total_pending"] == Decimal("9000.00")
    assert summary["total_adjustments"] == Decimal("0.00")
    assert summary["last_payout_at"] is not None
    assert len(summary["monthly"]) == 1

    payouts, total, total_amount = await payout_service.list_payouts(
        db, status="pending", host_id=host_id
    )
    assert total == 1
    assert total_amount == Decimal("9000.00")

    rows = await payout_service.export_payout_report(db, host_id=host_id)
    assert len(rows) == 2
    assert all(row["destination"].startswith("HDFC Bank XXXX9012") for row in rows)


async def test_discount_is_settled_the_same_with_or_without_saved_breakdown(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    discounted = {
        "base_amount": Decimal("10000.00"),
        "discount": Decimal("2000.00"),
        "total_amount": Decimal("8000.00"),
    }
    saved = await make_booking(created_at=datetime(2026, 9, 2, tzinfo=UTC), **discounted)
    await make_booking(created_at=datetime(2026, 9, 3, tzinfo=UTC), **discounted)
    await commission_service.compute_booking_financials(
        db, saved.id, persist=True, actor_id=admin_id
    )
    await db.commit()

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    assert [p.total_booking_amount for p in result.payouts] == [Decimal("8000.00")] * 2
    assert [p.commission_amount for p in result.payouts] == [Decimal("800.00")] * 2
    assert [p.net_payout for p in result.payouts] == [Decimal("7200.00")] * 2

    report = await commission_service.commission_report(db, *PERIOD)
    assert report["totals"]["total_amount"] == Decimal("16000.00")
    assert report["totals"]["commission_amount"] == Decimal("1600.00")
    assert report["totals"]["net_payout"] == Decimal("14400.00")


async def test_failed_refund_adjustment_rolls_back_its_payout(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id, monkeypatch
):
    await make_payout_profile()
    refunded = await make_booking(
        refund_status="approved",
        refund_amount=Decimal("2000.00"),
        created_at=datetime(2026, 9, 2, tzinfo=UTC),
    )
    plain = await make_booking(created_at=datetime(2026, 9, 3, tzinfo=UTC))

    async def broken_adjustment(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr(payout_service, "record_refund_adjustment", broken_adjustment)

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    statuses = {item.booking_id: item.status for item in result.items}
    assert statuses == {refunded.id: "failed", plain.id: "created"}
    assert result.failed_count == 1
    assert [p.booking_id for p in result.payouts] == [plain.id]
    assert await payout_count(db) == 1
    orphan = await db.scalar(select(PayoutRecord).where(PayoutRecord.booking_id == refunded.id))
    assert orphan is None


async def test_payout_relationships_are_never_lazy_loaded(
    db, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    await make_booking()

    result = await payout_service.generate_payouts(db, host_id, *PERIOD, actor_id=admin_id)
    await db.commit()

    with pytest.raises(InvalidRequestError):
        result.payouts[0].booking
