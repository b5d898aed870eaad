"""Booking breakdowns and the commission / GST reports."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.exceptions import ValidationError
from app.services.commission_service import commission_service
from app.services.rate_settings_service import rate_settings_service

SEPTEMBER = (date(2026, 9, 1), date(2026, 9, 30))


async def test_booking_breakdown_includes_addons(db, rate_settings, make_booking):
    booking = await make_booking(
        base_amount=Decimal("8000"),
        cleaning_fee=Decimal("1000"),
        extra_guest_charge=Decimal("1000"),
    )

    breakdown = await commission_service.compute_booking_financials(db, booking.id)

    assert breakdown.total_amount == Decimal("10000.00")
    assert breakdown.commission_amount == Decimal("1000.00")
    assert breakdown.net_payout == Decimal("9000.00")
    assert breakdown.settings_version == 1
    assert not booking.has_cached_financials


async def test_breakdown_takes_discount_off_the_base(db, rate_settings, make_booking):
    booking = await make_booking(
        base_amount=Decimal("9000"),
        cleaning_fee=Decimal("1000"),
        discount=Decimal("2000"),
        total_amount=Decimal("8000"),
    )

    breakdown = await commission_service.compute_booking_financials(db, booking.id)

    assert breakdown.base_amount == Decimal("7000.00")
    assert breakdown.total_amount == Decimal("8000.00")
    assert breakdown.commission_amount == Decimal("800.00")
    assert breakdown.net_payout == Decimal("7200.00")


async def test_breakdown_settles_on_charged_total_when_components_disagree(
    db, rate_settings, make_booking
):
    booking = await make_booking(base_amount=Decimal("10000"), total_amount=Decimal("9000"))

    breakdown = await commission_service.compute_booking_financials(db, booking.id)

    assert breakdown.total_amount == Decimal("9000.00")
    assert breakdown.commission_amount == Decimal("900.00")
    assert breakdown.net_payout == Decimal("8100.00")


async def test_persisting_a_breakdown_requires_an_actor(db, rate_settings, make_booking):
    booking = await make_booking()

    with pytest.raises(ValidationError):
        await commission_service.compute_booking_financials(db, booking.id, persist=True)


async def test_report_uses_cached_breakdown_after_rate_change(
    db, rate_settings, make_booking, admin_id, host_id
):
    booking = await make_booking()
    await commission_service.compute_booking_financials(
        db, booking.id, persist=True, actor_id=admin_id
    )
    assert booking.has_cached_financials
    assert booking.financials_settings_version == 1

    await rate_settings_service.update_settings(db, {"commission_rate": Decimal("20")}, admin_id)
    await make_booking()

    report = await commission_service.commission_report(db, *SEPTEMBER)

    assert report["group_by"] == "host"
    assert len(report["rows"]) == 1
    row = report["rows"][0]
    assert row["key"] == str(host_id)
    assert row["booking_count"] == 2
    # 10% on the cached booking, 20% on the one computed now
    assert row["commission_amount"] == Decimal("3000.00")
    assert report["totals"]["net_payout"] == Decimal("17000.00")


async def test_commission_report_by_month_skips_unpaid(db, rate_settings, make_booking):
    await make_booking(host_id=uuid4())
    await make_booking(payment_status="pending", booking_status="upcoming")

    report = await commission_service.commission_report(db, *SEPTEMBER, group_by="month")

    assert [row["key"] for row in report["rows"]] == ["2026-09"]
    assert report["rows"][0]["booking_count"] == 1


async def test_commission_report_rejects_unknown_grouping(db, rate_settings):
    with pytest.raises(ValidationError):
        await commission_service.commission_report(db, *SEPTEMBER, group_by="guest")


async def test_gst_report(db, rate_settings, make_booking, admin_id):
    await rate_settings_service.update_settings(
        db,
        {"gst_enabled": True, "gst_inclusive": False, "gst_number": "29ABCDE1234F1Z5"},
        admin_id,
    )
    await make_booking()

    report = await commission_service.gst_report(db, *SEPTEMBER)

    assert report["gst_enabled"] is True
    assert report["gst_number"] == "29ABCDE1234F1Z5"
    assert report["rows"][0]["key"] == "2026-09"
    assert report["rows"][0]["gst_amount"] == Decimal("1800.00")
    assert report["rows"][0]["tcs_amount"] == Decimal("0.00")
