"""Admin rate settings and audit trail endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.core.security import Actor
from app.models.settings import RateSettings
from app.schemas.audit import AuditLogResponse
from app.schemas.settings import (
    CommissionSettingsUpdate,
    GstSettingsUpdate,
    PlatformFeeSettingsUpdate,
    RateSettingsHistoryResponse,
    RateSettingsResponse,
    RateSettingsUpdate,
    TcsSettingsUpdate,
)
from app.services.audit_service import audit_service
from app.services.rate_settings_service import rate_settings_service

router = APIRouter()


# ============ RATE SETTINGS ============


@router.get("/settings", response_model=RateSettingsResponse)
async def get_settings(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RateSettings:
    """Get the current rate settings version."""
    return await rate_settings_service.require_current_settings(db)


@router.patch("/settings", response_model=RateSettingsResponse)
async def update_settings(
    data: RateSettingsUpdate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RateSettings:
    """Partially update rate settings; writes a new version."""
    return await rate_settings_service.update_settings(
        db, data.changes(), actor_id=admin.id, change_note=data.change_note
    )


@router.get("/settings/history", response_model=RateSettingsHistoryResponse)
async def get_settings_history(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(default=50, ge=1, le=200),
) -> RateSettingsHistoryResponse:
    """Get settings versions, newest first."""
    versions = await rate_settings_service.list_versions(db, limit=limit)
    return RateSettingsHistoryResponse(
        versions=[RateSettingsResponse.model_validate(v) for v in versions],
        current_version=versions[0].version if versions else None,
    )


@router.patch("/settings/commission", response_model=RateSettingsResponse)
async def update_commission_settings(
    data: CommissionSettingsUpdate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RateSettings:
    """Update the commission section."""
    return await rate_settings_service.update_category(
        db, "commission", data.changes(), admin.id, data.change_note
    )


@router.patch("/settings/gst", response_model=RateSettingsResponse)
async def update_gst_settings(
    data: GstSettingsUpdate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RateSettings:
    """Update the GST section."""
    return await rate_settings_service.update_category(
        db, "gst", data.changes(), admin.id, data.change_note
    )


@router.patch("/settings/tcs", response_model=RateSettingsResponse)
async def update_tcs_settings(
    data: TcsSettingsUpdate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RateSettings:
    """Update the TCS section."""
    return await rate_settings_service.update_category(
        db, "tcs", data.changes(), admin.id, data.change_note
    )


@router.patch("/settings/platform-fee", response_model=RateSettingsResponse)
async def update_platform_fee_settings(
    data: PlatformFeeSettingsUpdate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RateSettings:
    """Update the platform fee section."""
    return await rate_settings_service.update_category(
        db, "platform_fee", data.changes(), admin.id, data.change_note
    )


# ============ AUDIT TRAIL ============


@router.get("/audit-logs", response_model=list[AuditLogResponse])
async def get_audit_logs(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    resource_type: str | None = None,
    resource_id: UUID | None = None,
    limit: int = Query(default=100, ge=1, le=500),
) -> list:
    """Get financial audit entries, newest first."""
    return await audit_service.list_entries(
        db, resource_type=resource_type, resource_id=resource_id, limit=limit
    )
