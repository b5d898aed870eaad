"""Admin booking ledger, cancellation and refund endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.core.security import Actor
from app.models.booking import Booking
from app.schemas.booking import (
    BookingCancelRequest,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    RefundConfirm,
    RefundCreate,
    RefundDecision,
)
from app.services.booking_service import booking_service
from app.services.refund_service import refund_service

router = APIRouter()


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    host_id: UUID | None = None,
    booking_status: str | None = None,
    payment_status: str | None = None,
    refund_status: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> BookingListResponse:
    """List bookings with filters."""
    bookings, total = await booking_service.list_bookings(
        db,
        host_id=host_id,
        booking_status=booking_status,
        payment_status=payment_status,
        refund_status=refund_status,
        page=page,
        page_size=page_size,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get a booking by ID."""
    return await booking_service.get_booking(db, booking_id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    data: BookingStatusUpdate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Move a booking to a new status."""
    return await booking_service.update_booking_status(
        db, booking_id, data.status, actor_id=admin.id
    )


@router.patch("/{booking_id}/payment-status", response_model=BookingResponse)
async def update_payment_status(
    booking_id: UUID,
    data: BookingStatusUpdate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Move a booking's payment to a new status."""
    return await booking_service.update_payment_status(
        db, booking_id, data.status, actor_id=admin.id
    )


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    data: BookingCancelRequest,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Cancel a booking, optionally requesting a refund."""
    return await booking_service.admin_cancel_booking(
        db,
        booking_id,
        reason=data.reason,
        actor_id=admin.id,
        refund_amount=data.refund_amount,
    )


# ============ REFUNDS ============


@router.post("/{booking_id}/refund", response_model=BookingResponse)
async def request_refund(
    booking_id: UUID,
    data: RefundCreate,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Request a refund on a paid booking."""
    return await refund_service.request_refund(
        db, booking_id, data.amount, reason=data.reason, actor_id=admin.id
    )


@router.post("/{booking_id}/refund/decision", response_model=BookingResponse)
async def decide_refund(
    booking_id: UUID,
    data: RefundDecision,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Approve or reject a pending refund."""
    return await refund_service.decide_refund(
        db,
        booking_id,
        data.action,
        actor_id=admin.id,
        amount=data.amount,
        reason=data.reason,
    )


@router.post("/{booking_id}/refund/confirm", response_model=BookingResponse)
async def confirm_refund(
    booking_id: UUID,
    data: RefundConfirm,
    admin: Annotated[Actor, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Record the gateway's confirmation that an approved refund was paid."""
    return await refund_service.confirm_refund(
        db, booking_id, actor_id=admin.id, gateway_reference=data.gateway_reference
    )
