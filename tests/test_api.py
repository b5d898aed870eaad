"""HTTP surface: authentication, settings, financials, payouts, disputes."""

from decimal import Decimal
from uuid import uuid4

from tests.conftest import bearer

API = "/api/v1"


# ============ AUTH ============


async def test_admin_routes_require_a_token(client):
    resp = await client.get(f"{API}/admin/settings")
    assert resp.status_code in (401, 403)


async def test_host_token_cannot_reach_admin_routes(client, host_id):
    resp = await client.get(f"{API}/admin/settings", headers=bearer(host_id, role="host"))
    assert resp.status_code == 403
    assert resp.json()["code"] == "forbidden"


async def test_token_with_unknown_role_is_rejected(client, admin_id):
    resp = await client.get(f"{API}/admin/settings", headers=bearer(admin_id, role="root"))
    assert resp.status_code == 401
    assert resp.json()["code"] == "authentication_failed"


# ============ SETTINGS ============


async def test_settings_unavailable_before_bootstrap(client, admin_id):
    resp = await client.get(f"{API}/admin/settings", headers=bearer(admin_id))
    assert resp.status_code == 503
    assert resp.json()["code"] == "settings_not_configured"


async def test_settings_patch_writes_new_version(client, rate_settings, admin_id):
    headers = bearer(admin_id)

    resp = await client.get(f"{API}/admin/settings", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["version"] == 1

    resp = await client.patch(
        f"{API}/admin/settings",
        json={"commission_rate": "12.5", "change_note": "Festive season"},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["version"] == 2
    assert Decimal(body["commission_rate"]) == Decimal("12.5")
    assert body["change_note"] == "Festive season"
    assert body["created_by"] == str(admin_id)

    resp = await client.get(f"{API}/admin/settings/history", headers=headers)
    assert resp.json()["current_version"] == 2
    assert [v["version"] for v in resp.json()["versions"]] == [2, 1]


async def test_settings_patch_rejects_out_of_range_rate(client, rate_settings, admin_id):
    resp = await client.patch(
        f"{API}/admin/settings", json={"commission_rate": "150"}, headers=bearer(admin_id)
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_rate_value"


async def test_category_endpoint_updates_its_section(client, rate_settings, admin_id):
    resp = await client.patch(
        f"{API}/admin/settings/gst",
        json={"gst_enabled": True, "gst_inclusive": False},
        headers=bearer(admin_id),
    )
    assert resp.status_code == 200
    assert resp.json()["gst_enabled"] is True
    assert resp.json()["gst_inclusive"] is False


# ============ FINANCIALS ============


async def test_calculate_breakdown(client, rate_settings, admin_id):
    resp = await client.post(
        f"{API}/admin/financials/calculate",
        json={"base_amount": "10000"},
        headers=bearer(admin_id),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(body["commission_amount"]) == Decimal("1000.00")
    assert Decimal(body["net_payout"]) == Decimal("9000.00")
    assert body["settings_version"] == 1
    assert body["currency"] == "INR"


async def test_calculate_rejects_negative_amount(client, rate_settings, admin_id):
    resp = await client.post(
        f"{API}/admin/financials/calculate",
        json={"base_amount": "-5"},
        headers=bearer(admin_id),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_amount"


# ============ PAYOUTS ============


async def test_generate_and_process_payout(
    client, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    booking = await make_booking()
    headers = bearer(admin_id)

    resp = await client.post(
        f"{API}/admin/payouts/generate",
        json={"host_id": str(host_id), "period_start": "2026-09-01", "period_end": "2026-09-30"},
        headers=headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["created_count"] == 1
    payout = body["payouts"][0]
    assert payout["booking_id"] == str(booking.id)
    assert payout["status"] == "pending"
    assert Decimal(payout["net_payout"]) == Decimal("9000.00")

    resp = await client.post(
        f"{API}/admin/payouts/{payout['id']}/transition",
        json={"action": "process"},
        headers=headers,
    )
    assert resp.status_code == 422

    resp = await client.post(
        f"{API}/admin/payouts/{payout['id']}/transition",
        json={"action": "process", "transaction_id": "UTR0001"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert resp.json()["processed_by"] == str(admin_id)

    resp = await client.post(
        f"{API}/admin/payouts/{payout['id']}/transition",
        json={"action": "cancel"},
        headers=headers,
    )
    assert resp.status_code == 409
    assert resp.json()["code"] == "already_processed"

    resp = await client.get(f"{API}/admin/payouts/", params={"status": "completed"}, headers=headers)
    assert resp.json()["total"] == 1
    assert Decimal(resp.json()["total_amount"]) == Decimal("9000.00")

    resp = await client.get(f"{API}/admin/payouts/export", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["count"] == 1
    assert resp.json()["rows"][0]["transaction_id"] == "UTR0001"


async def test_generate_without_destination(client, rate_settings, make_booking, admin_id, host_id):
    await make_booking()

    resp = await client.post(
        f"{API}/admin/payouts/generate",
        json={"host_id": str(host_id), "period_start": "2026-09-01", "period_end": "2026-09-30"},
        headers=bearer(admin_id),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "payout_destination_missing"


async def test_unknown_transition_action(client, admin_id):
    resp = await client.post(
        f"{API}/admin/payouts/{uuid4()}/transition",
        json={"action": "refund"},
        headers=bearer(admin_id),
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_action"


# ============ HOST PAYOUT SETTINGS ============


async def test_host_manages_payout_settings(client, host_id):
    headers = bearer(host_id, role="host")

    resp = await client.get(f"{API}/payouts/settings", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["payout_method"] is None
    assert resp.json()["auto_withdraw"] is False

    resp = await client.put(
        f"{API}/payouts/settings",
        json={
            "payout_method": "bank_transfer",
            "account_holder_name": "Asha Menon",
            "bank_name": "HDFC Bank",
            "account_number": "123456789012",
            "ifsc_code": "hdfc0001234",
        },
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["account_number_masked"] == "XXXXXXXX9012"
    assert body["ifsc_code"] == "HDFC0001234"
    assert "account_number" not in body


async def test_host_settings_reject_bad_upi(client, host_id):
    resp = await client.put(
        f"{API}/payouts/settings",
        json={"payout_method": "upi", "upi_id": "not-a-upi"},
        headers=bearer(host_id, role="host"),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


async def test_host_sees_only_own_payouts(
    client, rate_settings, make_booking, make_payout_profile, admin_id, host_id
):
    await make_payout_profile()
    await make_booking()
    resp = await client.post(
        f"{API}/admin/payouts/generate",
        json={"host_id": str(host_id), "period_start": "2026-09-01", "period_end": "2026-09-30"},
        headers=bearer(admin_id),
    )
    payout_id = resp.json()["payouts"][0]["id"]

    resp = await client.get(f"{API}/payouts/{payout_id}", headers=bearer(host_id, role="host"))
    assert resp.status_code == 200

    resp = await client.get(f"{API}/payouts/{payout_id}", headers=bearer(uuid4(), role="host"))
    assert resp.status_code == 404


# ============ DISPUTES & AUDIT ============


async def test_dispute_flow_over_http(client, make_booking, admin_id):
    booking = await make_booking()
    guest_headers = bearer(booking.guest_id, role="guest")

    resp = await client.post(
        f"{API}/disputes/",
        json={
            "booking_id": str(booking.id),
            "category": "booking_dispute",
            "description": "Hot water did not work",
        },
        headers=guest_headers,
    )
    assert resp.status_code == 201
    dispute_id = resp.json()["id"]
    assert resp.json()["status"] == "pending"

    # Guests cannot decide disputes
    resp = await client.post(
        f"{API}/admin/disputes/{dispute_id}/decision",
        json={"action": "resolve", "resolution": "Refunded"},
        headers=guest_headers,
    )
    assert resp.status_code == 403

    resp = await client.post(
        f"{API}/admin/disputes/{dispute_id}/decision",
        json={"action": "resolve", "resolution": "Partial refund", "refund_amount": "800"},
        headers=bearer(admin_id),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "resolved"
    assert Decimal(resp.json()["refund_amount"]) == Decimal("800.00")

    resp = await client.get(f"{API}/admin/bookings/{booking.id}", headers=bearer(admin_id))
    assert resp.json()["refund_status"] == "approved"

    resp = await client.get(
        f"{API}/admin/audit-logs",
        params={"resource_type": "dispute"},
        headers=bearer(admin_id),
    )
    actions = {entry["action"] for entry in resp.json()}
    assert actions == {"dispute_open", "dispute_resolve"}


async def test_health_reports_settings_version(client, rate_settings):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["settings_version"] == 1
    assert resp.headers["Cache-Control"] == "no-store"
