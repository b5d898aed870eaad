"""Custom validation utilities."""

import re
from datetime import UTC, date, datetime, time, timedelta

from app.core.exceptions import ValidationError

IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
UPI_PATTERN = re.compile(r"^[A-Za-z0-9.\-_]{2,256}@[A-Za-z]{2,64}$")


def validate_ifsc(ifsc: str) -> bool:
    """Validate an Indian IFSC code.

    Format: 4 letters (bank), a zero, 6 alphanumerics (branch),
    e.g. HDFC0001234.
    """
    return bool(IFSC_PATTERN.match(ifsc.upper()))


def validate_upi_id(upi_id: str) -> bool:
    """Validate a UPI virtual payment address like ``name@bank``."""
    return bool(UPI_PATTERN.match(upi_id))


def validate_account_number(account_number: str) -> bool:
    """Indian bank account numbers are 9 to 18 digits."""
    return account_number.isdigit() and 9 <= len(account_number) <= 18


def period_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Convert an inclusive date period into a half-open UTC datetime range.

    Raises:
        ValidationError: If the period ends before it starts
    """
    if period_end < period_start:
        raise ValidationError(
            f"period_end {period_end.isoformat()} is before period_start {period_start.isoformat()}"
        )
    start = datetime.combine(period_start, time.min, tzinfo=UTC)
    end = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=UTC)
    return start, end
