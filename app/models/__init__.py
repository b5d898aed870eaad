"""Database models."""

from app.models.admin import AuditLog, DisputeCase
from app.models.booking import Booking
from app.models.host import HostPayoutProfile
from app.models.payout import PayoutAdjustment, PayoutRecord
from app.models.settings import RateSettings

__all__ = [
    # Settings
    "RateSettings",
    # Booking
    "Booking",
    # Host
    "HostPayoutProfile",
    # Payout
    "PayoutRecord",
    "PayoutAdjustment",
    # Admin
    "AuditLog",
    "DisputeCase",
]
