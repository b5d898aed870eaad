"""Dispute schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DisputeCreate(BaseModel):
    """Schema for opening a dispute."""

    booking_id: UUID
    category: str
    description: str = Field(..., min_length=3, max_length=5000)


class DisputeDecision(BaseModel):
    """Schema for resolving or rejecting a dispute."""

    action: str
    resolution: str = Field(..., min_length=3, max_length=5000)
    refund_amount: Decimal | None = None


class DisputeResponse(BaseModel):
    """Schema for a dispute."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    raised_by: UUID
    category: str
    description: str
    status: str
    resolution: str | None
    refund_amount: Decimal
    resolved_by: UUID | None
    resolved_at: datetime | None
    created_at: datetime


class DisputeListResponse(BaseModel):
    disputes: list[DisputeResponse]
    total: int
    page: int
    page_size: int

