#!/usr/bin/env python3
"""
Issue a development bearer token and store it for auth_request.py.

Tokens are normally issued by the identity service; this signs one with
the local JWT secret so the API can be exercised by hand.

Usage:
    python scripts/issue_token.py
    python scripts/issue_token.py --role host --actor-id 3f9c...
"""

import argparse
from datetime import timedelta
from pathlib import Path
from uuid import UUID, uuid4

from app.core.security import ACTOR_ROLES, create_access_token

TOKEN_FILE = Path(__file__).parent.parent / ".token"


def issue(actor_id: UUID, role: str, minutes: int) -> str:
    """Sign a token for the actor and write it to the token file."""
    token = create_access_token(
        {"sub": str(actor_id), "role": role},
        expires_delta=timedelta(minutes=minutes),
    )
    TOKEN_FILE.write_text(token)

    print(f"Actor: {actor_id} ({role})")
    print(f"Token: {token}")
    return token


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Issue a development token")
    parser.add_argument("--actor-id", type=UUID, default=None)
    parser.add_argument("--role", choices=sorted(ACTOR_ROLES), default="admin")
    parser.add_argument("--minutes", type=int, default=60)
    args = parser.parse_args()

    issue(args.actor_id or uuid4(), args.role, args.minutes)
