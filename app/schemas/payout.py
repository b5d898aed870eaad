"""Payout-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PayoutGenerateRequest(BaseModel):
    """Schema for generating payouts for a host and period."""

    host_id: UUID
    period_start: date
    period_end: date


class PayoutResponse(BaseModel):
    """Schema for a payout record (destination masked)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    host_id: UUID
    booking_id: UUID
    booking_reference: str
    period_start: date
    period_end: date

    total_booking_amount: Decimal
    commission_amount: Decimal
    gst_amount: Decimal
    tcs_amount: Decimal
    platform_fee_amount: Decimal
    penalties: Decimal
    total_deductions: Decimal
    net_payout: Decimal
    currency: str
    settings_version: int | None

    payout_method: str
    bank_name: str | None
    account_number_last4: str | None
    ifsc_code: str | None
    account_holder_name: str | None
    upi_id: str | None
    wallet_id: str | None

    status: str
    transaction_id: str | None
    failure_reason: str | None
    notes: str | None
    retry_count: int
    last_retry_at: datetime | None
    processed_at: datetime | None
    processed_by: UUID | None
    created_by: UUID
    created_at: datetime


class PayoutGenerationItemResponse(BaseModel):
    """Outcome for one booking."""

    model_config = ConfigDict(from_attributes=True)

    booking_id: UUID
    booking_reference: str
    status: str  # created, skipped, failed
    reason: str | None
    payout_id: UUID | None
    net_payout: Decimal | None


class PayoutGenerationResponse(BaseModel):
    """Schema for a payout generation batch result."""

    model_config = ConfigDict(from_attributes=True)

    host_id: UUID
    period_start: date
    period_end: date
    created_count: int
    skipped_count: int
    failed_count: int
    total_net_payout: Decimal
    items: list[PayoutGenerationItemResponse]
    payouts: list[PayoutResponse]


class PayoutTransitionRequest(BaseModel):
    """Schema for a payout action (start, process, fail, cancel)."""

    action: str
    transaction_id: str | None = Field(None, max_length=100)
    notes: str | None = Field(None, max_length=1000)


class PayoutListResponse(BaseModel):
    """Schema for paginated payout list."""

    payouts: list[PayoutResponse]
    total: int
    total_amount: Decimal  # Sum of net payouts matching the filters
    page: int
    page_size: int


class PayoutStatusTotals(BaseModel):
    count: int
    amount: Decimal


class PayoutStatisticsResponse(BaseModel):
    """Counts and amounts per payout status."""

    by_status: dict[str, PayoutStatusTotals]
    total_count: int
    total_amount: Decimal
    outstanding_amount: Decimal


class MonthlyPayoutSummary(BaseModel):
    month: str  # YYYY-MM
    payout_count: int
    net_payout: Decimal
    paid_amount: Decimal
    deductions: Decimal


class HostPayoutSummaryResponse(BaseModel):
    """Payout totals and monthly breakdown for one host."""

    host_id: UUID
    payout_count: int
    total_paid: Decimal
    total_pending: Decimal
    total_failed: Decimal
    total_adjustments: Decimal
    last_payout_at: datetime | None
    monthly: list[MonthlyPayoutSummary]


class PayoutAdjustmentResponse(BaseModel):
    """Schema for a compensating payout adjustment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    payout_id: UUID
    booking_id: UUID
    host_id: UUID
    amount: Decimal
    source: str
    source_reference: str
    reason: str | None
    status: str
    created_by: UUID
    created_at: datetime


class PayoutExportResponse(BaseModel):
    """Flat payout rows for reconciliation."""

    rows: list[dict[str, Any]]
    count: int
    generated_at: datetime


class PayoutSettingsResponse(BaseModel):
    """Host payout destination with the account number masked."""

    payout_method: str | None
    account_holder_name: str | None
    bank_name: str | None
    account_number_masked: str | None
    ifsc_code: str | None
    upi_id: str | None
    wallet_id: str | None
    auto_withdraw: bool


class PayoutSettingsUpdate(BaseModel):
    """Schema for updating a host's payout destination."""

    payout_method: str | None = None
    account_holder_name: str | None = Field(None, max_length=200)
    bank_name: str | None = Field(None, max_length=100)
    account_number: str | None = Field(None, min_length=9, max_length=18)
    ifsc_code: str | None = Field(None, min_length=11, max_length=11)
    upi_id: str | None = Field(None, max_length=100)
    wallet_id: str | None = Field(None, max_length=100)
    auto_withdraw: bool | None = None
