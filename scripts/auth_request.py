#!/usr/bin/env python3
"""
Make authenticated API requests using the stored token.

Usage:
    python scripts/auth_request.py
    python scripts/auth_request.py GET /api/v1/admin/payouts/statistics
    python scripts/auth_request.py PATCH /api/v1/admin/settings --data '{"gst_enabled": true}'
"""

import argparse
import json
import sys
from pathlib import Path

import httpx

BASE_URL = "http://localhost:8000"
TOKEN_FILE = Path(__file__).parent.parent / ".token"
METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def get_token() -> str:
    """Read stored access token."""
    token = TOKEN_FILE.read_text().strip() if TOKEN_FILE.exists() else ""
    if not token:
        print("ERROR: No token found. Run issue_token.py first.")
        sys.exit(1)
    return token


def request(method: str, endpoint: str, data: str | None = None) -> None:
    """Make authenticated API request and print the JSON response."""
    if method not in METHODS:
        print(f"ERROR: Unknown method {method}")
        sys.exit(1)

    body = json.loads(data) if data else None
    response = httpx.request(
        method,
        f"{BASE_URL}{endpoint}",
        headers={"Authorization": f"Bearer {get_token()}"},
        json=body,
        timeout=10.0,
        follow_redirects=True,
    )

    print(f"Status: {response.status_code}")
    try:
        print(json.dumps(response.json(), indent=2))
    except json.JSONDecodeError:
        print(response.text)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Make authenticated API request")
    parser.add_argument("method", nargs="?", default="GET")
    parser.add_argument("endpoint", nargs="?", default="/api/v1/admin/settings")
    parser.add_argument("--data", "-d", help="JSON request body")
    args = parser.parse_args()

    request(args.method.upper(), args.endpoint, args.data)
