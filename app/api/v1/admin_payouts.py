"""Admin payout management endpoints."""

from datetime import UTC, date, datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.core.middleware import payout_generation_limiter, report_export_limiter
from app.core.security import Actor
from app.models.payout import PayoutRecord
from app.schemas.payout import (
    HostPayoutSummaryResponse,
    PayoutAdjustmentResponse,
    PayoutExportResponse,
    PayoutGenerateRequest,
    PayoutGenerationResponse,
    PayoutListResponse,
    PayoutResponse,
    PayoutStatisticsResponse,
    PayoutTransitionRequest,
)
from app.services.payout_service import payout_service

router = APIRouter()


@router.post(
    "/generate",
    response_model=PayoutGenerationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(payout_generation_limiter)],
)
async def generate_payouts(
    data: PayoutGenerateRequest,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PayoutGenerationResponse:
    """Create pending payouts for a host's completed, paid bookings in a period."""
    result = await payout_service.generate_payouts(
        db, data.host_id, data.period_start, data.period_end, actor_id=admin.id
    )
    return PayoutGenerationResponse.model_validate(result)


@router.get("/", response_model=PayoutListResponse)
async def list_payouts(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(default=None, alias="status"),
    host_id: UUID | None = None,
    payout_method: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> PayoutListResponse:
    """List payouts with filters."""
    payouts, total, total_amount = await payout_service.list_payouts(
        db,
        status=status_filter,
        host_id=host_id,
        payout_method=payout_method,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )
    return PayoutListResponse(
        payouts=[PayoutResponse.model_validate(p) for p in payouts],
        total=total,
        total_amount=total_amount,
        page=page,
        page_size=page_size,
    )


@router.get("/statistics", response_model=PayoutStatisticsResponse)
async def get_payout_statistics(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    host_id: UUID | None = None,
) -> dict:
    """Payout counts and amounts per status."""
    return await payout_service.payout_statistics(db, host_id=host_id)


@router.get(
    "/export",
    response_model=PayoutExportResponse,
    dependencies=[Depends(report_export_limiter)],
)
async def export_payouts(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: str | None = Query(default=None, alias="status"),
    host_id: UUID | None = None,
    payout_method: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> PayoutExportResponse:
    """Export payout rows for reconciliation."""
    rows = await payout_service.export_payout_report(
        db,
        status=status_filter,
        host_id=host_id,
        payout_method=payout_method,
        date_from=date_from,
        date_to=date_to,
    )
    return PayoutExportResponse(rows=rows, count=len(rows), generated_at=datetime.now(UTC))


@router.get("/hosts/{host_id}/summary", response_model=HostPayoutSummaryResponse)
async def get_host_payout_summary(
    host_id: UUID,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Payout totals and monthly breakdown for a host."""
    return await payout_service.host_payout_summary(db, host_id)


@router.get("/adjustments", response_model=list[PayoutAdjustmentResponse])
async def list_adjustments(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    payout_id: UUID | None = None,
    host_id: UUID | None = None,
) -> list:
    """Compensating adjustments awaiting reconciliation."""
    return await payout_service.list_adjustments(db, payout_id=payout_id, host_id=host_id)


@router.get("/{payout_id}", response_model=PayoutResponse)
async def get_payout(
    payout_id: UUID,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PayoutRecord:
    """Get a payout by ID."""
    return await payout_service.get_payout(db, payout_id)


@router.post("/{payout_id}/transition", response_model=PayoutResponse)
async def transition_payout(
    payout_id: UUID,
    data: PayoutTransitionRequest,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PayoutRecord:
    """Apply start, process, fail or cancel to a payout."""
    return await payout_service.transition_payout(
        db,
        payout_id,
        data.action,
        actor_id=admin.id,
        transaction_id=data.transaction_id,
        notes=data.notes,
    )
