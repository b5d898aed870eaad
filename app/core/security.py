"""Bearer token verification.

Tokens are issued by the identity service; this backend only verifies
them and reads the actor id and role from the claims.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import AuthenticationError

ACTOR_ROLES = frozenset({"admin", "host", "guest"})


@dataclass(frozen=True)
class Actor:
    """Authenticated caller of a mutating operation."""

    id: UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token (operator scripts and tests)."""
    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")
    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def actor_from_token(token: str) -> Actor:
    """Resolve the actor identity carried by an access token."""
    payload = verify_token(token, token_type="access")
    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or role not in ACTOR_ROLES:
        raise AuthenticationError("Invalid token payload")
    try:
        actor_id = UUID(str(subject))
    except ValueError:
        raise AuthenticationError("Invalid token subject")
    return Actor(id=actor_id, role=role)
