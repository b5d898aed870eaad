"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BookingResponse(BaseModel):
    """Schema for a booking ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_reference: str
    host_id: UUID
    guest_id: UUID
    stay_id: UUID

    # Dates
    check_in: date
    check_out: date
    nights: int
    guests: int

    # Pricing
    base_amount: Decimal
    cleaning_fee: Decimal
    extra_guest_charge: Decimal
    discount: Decimal
    penalties: Decimal
    total_amount: Decimal
    currency: str

    # Cached breakdown
    commission_amount: Decimal | None
    gst_amount: Decimal | None
    tcs_amount: Decimal | None
    platform_fee_amount: Decimal | None
    total_deductions: Decimal | None
    net_payout: Decimal | None
    financials_settings_version: int | None
    financials_computed_at: datetime | None

    # Status
    payment_status: str
    booking_status: str
    refund_status: str
    refund_amount: Decimal
    refund_reason: str | None
    refund_gateway_reference: str | None
    dispute_status: str
    cancellation_reason: str | None
    admin_cancelled: bool

    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingStatusUpdate(BaseModel):
    """Schema for moving a booking or its payment to a new status."""

    status: str


class BookingCancelRequest(BaseModel):
    """Schema for an admin cancellation."""

    reason: str = Field(..., min_length=3, max_length=1000)
    refund_amount: Decimal | None = None


class RefundCreate(BaseModel):
    """Schema for requesting a refund."""

    amount: Decimal
    reason: str = Field(..., min_length=3, max_length=1000)


class RefundDecision(BaseModel):
    """Schema for approving or rejecting a refund."""

    action: str
    amount: Decimal | None = None
    reason: str | None = Field(None, max_length=1000)


class RefundConfirm(BaseModel):
    """Schema for the gateway's refund confirmation."""

    gateway_reference: str = Field(..., min_length=1, max_length=100)
