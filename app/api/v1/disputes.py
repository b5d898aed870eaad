"""Dispute endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_current_admin, get_db
from app.core.security import Actor
from app.models.admin import DisputeCase
from app.schemas.dispute import (
    DisputeCreate,
    DisputeDecision,
    DisputeListResponse,
    DisputeResponse,
)
from app.services.dispute_service import dispute_service

router = APIRouter()
admin_router = APIRouter()


@router.post("/", response_model=DisputeResponse, status_code=status.HTTP_201_CREATED)
async def open_dispute(
    data: DisputeCreate,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DisputeCase:
    """Open a dispute on a booking."""
    return await dispute_service.open_dispute(
        db,
        data.booking_id,
        raised_by=actor.id,
        category=data.category,
        description=data.description,
    )


# ============ ADMIN ============


@admin_router.get("/", response_model=DisputeListResponse)
async def list_disputes(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(default=None, alias="status"),
    booking_id: UUID | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> DisputeListResponse:
    """List disputes."""
    disputes, total = await dispute_service.list_disputes(
        db, status=status_filter, booking_id=booking_id, page=page, page_size=page_size
    )
    return DisputeListResponse(
        disputes=[DisputeResponse.model_validate(d) for d in disputes],
        total=total,
        page=page,
        page_size=page_size,
    )


@admin_router.get("/{dispute_id}", response_model=DisputeResponse)
async def get_dispute(
    dispute_id: UUID,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DisputeCase:
    """Get a dispute by ID."""
    return await dispute_service.get_dispute(db, dispute_id)


@admin_router.post("/{dispute_id}/decision", response_model=DisputeResponse)
async def decide_dispute(
    dispute_id: UUID,
    data: DisputeDecision,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DisputeCase:
    """Resolve or reject a dispute, optionally approving a refund."""
    return await dispute_service.resolve_dispute(
        db,
        dispute_id,
        data.action,
        actor_id=admin.id,
        resolution=data.resolution,
        refund_amount=data.refund_amount,
    )
