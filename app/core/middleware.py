"""HTTP middleware and per-endpoint rate limiters."""

import logging
import time
from typing import Annotated

from fastapi import Depends, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

import redis.asyncio as redis

from app.api.deps import get_current_actor
from app.config import settings
from app.core.exceptions import RateLimitExceeded
from app.core.security import Actor

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


class SlidingWindow:
    """Requests per key over the last minute, kept in a Redis sorted set."""

    def __init__(self, redis_url: str | None = None):
        self.redis_url = redis_url or settings.redis_url
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def hit(self, key: str) -> int:
        """Record one request and return how many preceded it in the window.

        Raises:
            redis.RedisError: If Redis is unreachable
        """
        client = await self.get_redis()
        now_ns = time.time_ns()
        now = now_ns / 1e9
        async with client.pipeline(transaction=True) as pipe:
            await pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
            await pipe.zcard(key)
            # Member must be unique per request; several can share a second
            await pipe.zadd(key, {str(now_ns): now})
            await pipe.expire(key, WINDOW_SECONDS)
            results = await pipe.execute()
        return results[1]


def client_ip(request: Request) -> str:
    """Client address, honouring the proxy headers set by the load balancer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global per-IP rate limit; fails open when Redis is down."""

    EXEMPT_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")

    def __init__(self, app, requests_per_minute: int = 100, redis_url: str | None = None):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.window = SlidingWindow(redis_url)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in self.EXEMPT_PATHS or settings.debug:
            return await call_next(request)

        try:
            seen = await self.window.hit(f"rate_limit:{client_ip(request)}")
        except redis.RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return await call_next(request)

        reset = str(int(time.time()) + WINDOW_SECONDS)
        if seen >= self.requests_per_minute:
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many requests. Please try again later.",
                    "code": RateLimitExceeded.code,
                },
                headers={
                    "Retry-After": str(WINDOW_SECONDS),
                    "X-RateLimit-Limit": str(self.requests_per_minute),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset,
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining"] = str(
            max(0, self.requests_per_minute - seen - 1)
        )
        response.headers["X-RateLimit-Reset"] = reset
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Stamp a request id and response time on every response; log slow ones."""

    SLOW_REQUEST_SECONDS = 1.0

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)

        duration = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        if duration > self.SLOW_REQUEST_SECONDS:
            logger.warning(
                f"SLOW REQUEST: {request.method} {request.url.path} "
                f"took {duration:.3f}s request_id={request_id}"
            )
        elif request.method != "GET":
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"in {duration:.3f}s request_id={request_id}"
            )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        # Financial data must never be cached by intermediaries
        "Cache-Control": "no-store",
    }

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RateLimiter:
    """Per-actor limit for expensive endpoints, used as a route dependency."""

    def __init__(self, requests_per_minute: int = 10, key_prefix: str = "api"):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Max requests allowed per actor
            key_prefix: Redis key prefix naming the protected operation
        """
        self.requests_per_minute = requests_per_minute
        self.key_prefix = key_prefix
        self.window = SlidingWindow()

    async def __call__(
        self,
        actor: Annotated[Actor, Depends(get_current_actor)],
    ) -> None:
        """Count the request against the actor's window.

        Raises:
            RateLimitExceeded: If the actor exceeded the limit
        """
        try:
            seen = await self.window.hit(f"rate:{self.key_prefix}:{actor.id}")
        except redis.RedisError as e:
            # Allow request if Redis is unavailable
            logger.warning(f"Rate limiter unavailable for {self.key_prefix}: {e}")
            return

        if seen >= self.requests_per_minute:
            logger.warning(f"Rate limit hit on {self.key_prefix} by actor {actor.id}")
            raise RateLimitExceeded()


# Expensive admin operations
payout_generation_limiter = RateLimiter(requests_per_minute=10, key_prefix="payout_generation")
report_export_limiter = RateLimiter(requests_per_minute=5, key_prefix="report_export")
