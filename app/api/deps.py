"""API dependencies for authentication and common operations."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthorizationError
from app.core.security import Actor, actor_from_token
from app.database import get_db

# Security scheme
security = HTTPBearer()

__all__ = ["get_db", "get_current_actor", "get_current_admin", "get_current_host"]


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> Actor:
    """Get the authenticated actor from the bearer token."""
    return actor_from_token(credentials.credentials)


async def get_current_host(
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> Actor:
    """Get current actor and verify they are a host."""
    if actor.role not in ("host", "admin"):
        raise AuthorizationError("Host access required")
    return actor


async def get_current_admin(
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> Actor:
    """Get current actor and verify they are an admin."""
    if not actor.is_admin:
        raise AuthorizationError("Admin access required")
    return actor
