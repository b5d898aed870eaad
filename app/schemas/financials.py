"""Financial calculation and report schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class FinancialCalculationRequest(BaseModel):
    """Schema for an ad-hoc breakdown calculation."""

    base_amount: Decimal
    cleaning_fee: Decimal | None = None
    extra_guest_charge: Decimal | None = None
    penalties: Decimal | None = None


class BookingFinancialsRequest(BaseModel):
    """Schema for computing a booking's breakdown."""

    persist: bool = False


class FinancialBreakdownResponse(BaseModel):
    """Schema for a computed breakdown."""

    model_config = ConfigDict(from_attributes=True)

    base_amount: Decimal
    cleaning_fee: Decimal
    extra_guest_charge: Decimal
    excluded_addons: Decimal
    total_amount: Decimal
    commission_amount: Decimal
    gst_amount: Decimal
    tcs_amount: Decimal
    platform_fee_amount: Decimal
    penalties: Decimal
    total_deductions: Decimal
    net_payout: Decimal
    settings_version: int | None
    currency: str = "INR"


class CommissionReportRow(BaseModel):
    key: str  # host id or YYYY-MM
    booking_count: int
    total_amount: Decimal
    commission_amount: Decimal
    platform_fee_amount: Decimal
    net_payout: Decimal


class CommissionReportResponse(BaseModel):
    """Commission earned on paid bookings."""

    period_start: date
    period_end: date
    group_by: str
    rows: list[CommissionReportRow]
    totals: dict[str, Decimal | int]


class GstReportRow(BaseModel):
    key: str  # YYYY-MM
    booking_count: int
    taxable_amount: Decimal
    gst_amount: Decimal
    tcs_amount: Decimal


class GstReportResponse(BaseModel):
    """GST and TCS collected on paid bookings."""

    period_start: date
    period_end: date
    gst_number: str | None
    gst_enabled: bool
    gst_rate: Decimal
    rows: list[GstReportRow]
    totals: dict[str, Decimal | int]
