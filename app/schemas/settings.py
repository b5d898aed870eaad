"""Rate settings schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RateSettingsResponse(BaseModel):
    """Schema for a rate settings version."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    version: int

    commission_rate: Decimal
    commission_type: str
    fixed_commission_amount: Decimal | None
    commission_on_cleaning_fee: bool
    commission_on_extra_guests: bool

    gst_enabled: bool
    gst_rate: Decimal
    gst_number: str | None
    gst_on_commission: bool
    gst_inclusive: bool

    tcs_enabled: bool
    tcs_rate: Decimal
    tcs_threshold: Decimal

    platform_fee_enabled: bool
    platform_fee_type: str
    platform_fee_rate: Decimal
    fixed_platform_fee: Decimal | None

    change_note: str | None
    created_by: UUID | None
    created_at: datetime


class SettingsChange(BaseModel):
    """Common part of every settings update."""

    change_note: str | None = Field(None, max_length=500)

    def changes(self) -> dict:
        """Fields the caller actually sent, without the note."""
        return self.model_dump(exclude_unset=True, exclude={"change_note"})


class CommissionSettingsUpdate(SettingsChange):
    commission_rate: Decimal | None = None
    commission_type: str | None = None
    fixed_commission_amount: Decimal | None = None
    commission_on_cleaning_fee: bool | None = None
    commission_on_extra_guests: bool | None = None


class GstSettingsUpdate(SettingsChange):
    gst_enabled: bool | None = None
    gst_rate: Decimal | None = None
    gst_number: str | None = Field(None, max_length=20)
    gst_on_commission: bool | None = None
    gst_inclusive: bool | None = None


class TcsSettingsUpdate(SettingsChange):
    tcs_enabled: bool | None = None
    tcs_rate: Decimal | None = None
    tcs_threshold: Decimal | None = None


class PlatformFeeSettingsUpdate(SettingsChange):
    platform_fee_enabled: bool | None = None
    platform_fee_type: str | None = None
    platform_fee_rate: Decimal | None = None
    fixed_platform_fee: Decimal | None = None


class RateSettingsUpdate(
    CommissionSettingsUpdate,
    GstSettingsUpdate,
    TcsSettingsUpdate,
    PlatformFeeSettingsUpdate,
):
    """Partial update across all sections; omitted fields keep their value."""


class RateSettingsHistoryResponse(BaseModel):
    """Schema for the settings version history."""

    versions: list[RateSettingsResponse]
    current_version: int | None
