"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.router import api_router
from app.config import settings
from app.core.exceptions import AppException
from app.core.immutability import register_immutability_enforcement
from app.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from app.database import close_db, get_db, get_db_context, init_db
from app.services.rate_settings_service import rate_settings_service

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    register_immutability_enforcement()

    if settings.debug:
        await init_db()

    # Settings must exist before any calculation runs
    async with get_db_context() as db:
        await rate_settings_service.ensure_default_settings(db)

    logger.info(f"{settings.app_name} {settings.app_version} started ({settings.environment})")

    yield

    # Shutdown
    await close_db()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Homestay booking financial settlement API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Exception handlers
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "code": exc.code},
            headers=exc.headers,
        )

    # Middleware (order matters - first added = last executed)
    # 1. Security headers (outermost)
    app.add_middleware(SecurityHeadersMiddleware)

    # 2. Rate limiting (production only)
    if settings.environment != "development":
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_minute=settings.rate_limit_per_minute,
        )

    # 3. Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # 4. CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 5. Gzip compression (innermost)
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Include API routes
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", response_model=None)
    async def health_check(db: Annotated[AsyncSession, Depends(get_db)]) -> dict | JSONResponse:
        """Liveness plus the settings version new calculations will use."""
        try:
            current = await rate_settings_service.get_current_settings(db)
        except SQLAlchemyError as e:
            logger.error(f"Health check could not reach the database: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "database": "unreachable"},
            )
        return {
            "status": "healthy" if current else "degraded",
            "version": settings.app_version,
            "environment": settings.environment,
            "settings_version": current.version if current else None,
            "currency": settings.currency,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/")
    async def root() -> dict:
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
