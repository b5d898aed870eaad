"""Commission, GST, TCS and platform-fee policy.

RatePolicy is the immutable value the calculator consumes. It is built
from the current RateSettings version; bounds are enforced here when a
new version is written, never inside the calculator.
"""

from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any

from app.core.exceptions import InvalidRateValue

COMMISSION_TYPES = frozenset({"percentage", "fixed"})
PLATFORM_FEE_TYPES = frozenset({"percentage", "fixed"})

# Upper bound (inclusive) for each percentage rate
RATE_BOUNDS: dict[str, Decimal] = {
    "commission_rate": Decimal("50"),
    "gst_rate": Decimal("30"),
    "tcs_rate": Decimal("10"),
    "platform_fee_rate": Decimal("20"),
}

NON_NEGATIVE_AMOUNTS = ("fixed_commission_amount", "fixed_platform_fee", "tcs_threshold")


@dataclass(frozen=True)
class RatePolicy:
    """Snapshot of the active rate settings."""

    commission_rate: Decimal = Decimal("10")
    commission_type: str = "percentage"
    fixed_commission_amount: Decimal | None = None
    commission_on_cleaning_fee: bool = True
    commission_on_extra_guests: bool = True

    gst_enabled: bool = False
    gst_rate: Decimal = Decimal("18")
    gst_on_commission: bool = False
    gst_inclusive: bool = True

    tcs_enabled: bool = False
    tcs_rate: Decimal = Decimal("1")
    tcs_threshold: Decimal = Decimal("7000")

    platform_fee_enabled: bool = False
    platform_fee_type: str = "percentage"
    platform_fee_rate: Decimal = Decimal("2")
    fixed_platform_fee: Decimal | None = None

    version: int | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "version")

    @classmethod
    def from_source(cls, source: Any) -> "RatePolicy":
        """Build a policy from any object exposing the policy attributes."""
        values = {name: getattr(source, name) for name in cls.field_names()}
        for name in RATE_BOUNDS:
            values[name] = Decimal(values[name])
        for name in NON_NEGATIVE_AMOUNTS:
            if values[name] is not None:
                values[name] = Decimal(values[name])
        return cls(**values, version=getattr(source, "version", None))


def _as_decimal(field: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidRateValue(field, value)
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidRateValue(field, value)
    if not result.is_finite():
        raise InvalidRateValue(field, value)
    return result


def validate_rate_values(values: dict[str, Any]) -> dict[str, Any]:
    """Validate a full set of merged policy values.

    Args:
        values: Every policy field, after merging a partial update

    Returns:
        The values with numeric fields normalised to Decimal

    Raises:
        InvalidRateValue: If any value is outside its bounds or inconsistent
    """
    cleaned = dict(values)

    for field, upper in RATE_BOUNDS.items():
        rate = _as_decimal(field, cleaned[field])
        if rate < 0 or rate > upper:
            raise InvalidRateValue(field, rate, f"{field} must be between 0 and {upper}, got {rate}")
        cleaned[field] = rate

    for field in NON_NEGATIVE_AMOUNTS:
        if cleaned.get(field) is None:
            continue
        amount = _as_decimal(field, cleaned[field])
        if amount < 0:
            raise InvalidRateValue(field, amount, f"{field} must not be negative, got {amount}")
        cleaned[field] = amount

    if cleaned["commission_type"] not in COMMISSION_TYPES:
        raise InvalidRateValue("commission_type", cleaned["commission_type"])
    if cleaned["platform_fee_type"] not in PLATFORM_FEE_TYPES:
        raise InvalidRateValue("platform_fee_type", cleaned["platform_fee_type"])

    if cleaned["commission_type"] == "fixed" and cleaned.get("fixed_commission_amount") is None:
        raise InvalidRateValue(
            "fixed_commission_amount", None, "fixed_commission_amount is required for fixed commission"
        )
    if (
        cleaned["platform_fee_enabled"]
        and cleaned["platform_fee_type"] == "fixed"
        and cleaned.get("fixed_platform_fee") is None
    ):
        raise InvalidRateValue(
            "fixed_platform_fee", None, "fixed_platform_fee is required for a fixed platform fee"
        )

    return cleaned
