"""Financial calculation and reporting endpoints (admin only)."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.config import settings
from app.core.security import Actor
from app.schemas.financials import (
    BookingFinancialsRequest,
    CommissionReportResponse,
    FinancialBreakdownResponse,
    FinancialCalculationRequest,
    GstReportResponse,
)
from app.services.commission_service import commission_service

router = APIRouter()


@router.post("/calculate", response_model=FinancialBreakdownResponse)
async def calculate_financials(
    data: FinancialCalculationRequest,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FinancialBreakdownResponse:
    """Compute a breakdown for the given amounts with the current settings."""
    breakdown = await commission_service.calculate(
        db,
        base_amount=data.base_amount,
        cleaning_fee=data.cleaning_fee,
        extra_guest_charge=data.extra_guest_charge,
        penalties=data.penalties,
    )
    return FinancialBreakdownResponse(**breakdown.as_dict(), currency=settings.currency)


@router.post("/bookings/{booking_id}", response_model=FinancialBreakdownResponse)
async def compute_booking_financials(
    booking_id: UUID,
    data: BookingFinancialsRequest,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> FinancialBreakdownResponse:
    """Compute a booking's breakdown, optionally caching it on the booking."""
    breakdown = await commission_service.compute_booking_financials(
        db, booking_id, persist=data.persist, actor_id=admin.id
    )
    return FinancialBreakdownResponse(**breakdown.as_dict(), currency=settings.currency)


@router.get("/commission-report", response_model=CommissionReportResponse)
async def get_commission_report(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    start_date: date = Query(...),
    end_date: date = Query(...),
    group_by: str = Query(default="host"),
    host_id: UUID | None = None,
) -> dict:
    """Commission earned on paid bookings, per host or per month."""
    return await commission_service.commission_report(
        db, start_date, end_date, group_by=group_by, host_id=host_id
    )


@router.get("/gst-report", response_model=GstReportResponse)
async def get_gst_report(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    start_date: date = Query(...),
    end_date: date = Query(...),
) -> dict:
    """GST and TCS collected on paid bookings, per month."""
    return await commission_service.gst_report(db, start_date, end_date)
