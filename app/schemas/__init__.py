"""Pydantic schemas for API validation."""

from app.schemas.audit import AuditLogResponse
from app.schemas.booking import (
    BookingCancelRequest,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    RefundConfirm,
    RefundCreate,
    RefundDecision,
)
from app.schemas.dispute import (
    DisputeCreate,
    DisputeDecision,
    DisputeListResponse,
    DisputeResponse,
)
from app.schemas.financials import (
    BookingFinancialsRequest,
    CommissionReportResponse,
    FinancialBreakdownResponse,
    FinancialCalculationRequest,
    GstReportResponse,
)
from app.schemas.payout import (
    HostPayoutSummaryResponse,
    PayoutAdjustmentResponse,
    PayoutExportResponse,
    PayoutGenerateRequest,
    PayoutGenerationResponse,
    PayoutListResponse,
    PayoutResponse,
    PayoutSettingsResponse,
    PayoutSettingsUpdate,
    PayoutStatisticsResponse,
    PayoutTransitionRequest,
)
from app.schemas.settings import (
    CommissionSettingsUpdate,
    GstSettingsUpdate,
    PlatformFeeSettingsUpdate,
    RateSettingsHistoryResponse,
    RateSettingsResponse,
    RateSettingsUpdate,
    TcsSettingsUpdate,
)

__all__ = [
    # Audit
    "AuditLogResponse",
    # Booking
    "BookingCancelRequest",
    "BookingListResponse",
    "BookingResponse",
    "BookingStatusUpdate",
    "RefundConfirm",
    "RefundCreate",
    "RefundDecision",
    # Dispute
    "DisputeCreate",
    "DisputeDecision",
    "DisputeListResponse",
    "DisputeResponse",
    # Financials
    "BookingFinancialsRequest",
    "CommissionReportResponse",
    "FinancialBreakdownResponse",
    "FinancialCalculationRequest",
    "GstReportResponse",
    # Payout
    "HostPayoutSummaryResponse",
    "PayoutAdjustmentResponse",
    "PayoutExportResponse",
    "PayoutGenerateRequest",
    "PayoutGenerationResponse",
    "PayoutListResponse",
    "PayoutResponse",
    "PayoutSettingsResponse",
    "PayoutSettingsUpdate",
    "PayoutStatisticsResponse",
    "PayoutTransitionRequest",
    # Settings
    "CommissionSettingsUpdate",
    "GstSettingsUpdate",
    "PlatformFeeSettingsUpdate",
    "RateSettingsHistoryResponse",
    "RateSettingsResponse",
    "RateSettingsUpdate",
    "TcsSettingsUpdate",
]
