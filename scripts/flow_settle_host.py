#!/usr/bin/env python3
"""
Settlement flow script for one host and period.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_settle_host.py --host-id <UUID> --start 2026-09-01 --end 2026-09-30
    python scripts/flow_settle_host.py --host-id <UUID> --start 2026-09-01 --end 2026-09-30 --process

Flow:
    1. Issue an admin token
    2. Show current rate settings
    3. Generate payouts for the period
    4. Start each created payout
    5. Mark each payout processed (with --process)
    6. Show the host's payout summary
"""

import argparse
import json
import sys
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import httpx

from app.core.security import create_access_token

BASE_URL = "http://localhost:8000"
TOKEN_FILE = Path(__file__).parent.parent / ".token"


def admin_token() -> str:
    """Sign an admin token for a throwaway actor."""
    token = create_access_token({"sub": str(uuid4()), "role": "admin"})
    TOKEN_FILE.write_text(token)
    return token


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers={"Authorization": f"Bearer {token}"},
        json=data if method != "GET" else None,
        timeout=30.0,
        follow_redirects=True,
    )
    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Generate and settle payouts for a host")
    parser.add_argument("--host-id", required=True, help="Host UUID")
    parser.add_argument("--start", required=True, help="Period start (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, help="Period end (YYYY-MM-DD)")
    parser.add_argument("--process", action="store_true", help="Mark payouts processed")
    args = parser.parse_args()

    # Step 1: Admin token
    print_step(1, "Issue admin token")
    token = admin_token()

    # Step 2: Current settings
    print_step(2, "Current rate settings")
    settings_result = api_request(token, "GET", "/api/v1/admin/settings")
    if not print_result(settings_result, ["version", "commission_rate", "gst_enabled", "tcs_enabled", "platform_fee_enabled"]):
        sys.exit(1)

    # Step 3: Generate payouts
    print_step(3, "Generate payouts")
    generate_result = api_request(token, "POST", "/api/v1/admin/payouts/generate", {
        "host_id": args.host_id,
        "period_start": args.start,
        "period_end": args.end,
    })
    if not print_result(generate_result, ["created_count", "skipped_count", "failed_count", "total_net_payout", "items"]):
        sys.exit(1)

    payout_ids = [p["id"] for p in generate_result["data"]["payouts"]]
    if not payout_ids:
        print("\nNo new payouts for this period")
        return

    # Step 4: Start payouts
    print_step(4, "Start payouts")
    for payout_id in payout_ids:
        result = api_request(token, "POST", f"/api/v1/admin/payouts/{payout_id}/transition", {"action": "start"})
        if not print_result(result, ["id", "booking_reference", "net_payout", "status"]):
            sys.exit(1)

    # Step 5: Process payouts
    if args.process:
        print_step(5, "Process payouts")
        stamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
        for index, payout_id in enumerate(payout_ids, start=1):
            result = api_request(token, "POST", f"/api/v1/admin/payouts/{payout_id}/transition", {
                "action": "process",
                "transaction_id": f"MANUAL-{stamp}-{index}",
            })
            if not print_result(result, ["id", "status", "transaction_id", "processed_at"]):
                sys.exit(1)

    # Step 6: Host summary
    print_step(6, "Host payout summary")
    summary_result = api_request(token, "GET", f"/api/v1/admin/payouts/hosts/{args.host_id}/summary")
    print_result(summary_result, ["payout_count", "total_paid", "total_pending", "total_adjustments"])

    print("\n" + "="*60)
    print("SETTLEMENT FLOW COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
