"""Booking financial breakdown.

CRITICAL BUSINESS LOGIC (order matters, later steps use the running total):
1. total = base amount, plus the cleaning fee when commission_on_cleaning_fee
2. plus the extra-guest charge when commission_on_extra_guests
3. commission = total * rate / 100, or the fixed commission amount
4. GST on total (or total + commission when gst_on_commission):
   - exclusive pricing adds GST to the total
   - inclusive pricing extracts GST from the total, which does not change
5. TCS = total * tcs_rate / 100 when total >= tcs_threshold (never added to total)
6. platform fee = total * rate / 100, or the fixed platform fee
7. total deductions = commission + GST + TCS + platform fee + penalties
8. net payout = total - total deductions

Add-ons excluded by their commission toggle are not part of the
commission-bearing total at all; they are reported as excluded_addons.

Every component is rounded to paise (ROUND_HALF_UP) as it is computed,
so deductions always sum exactly.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from app.core.exceptions import InvalidAmount
from app.domain.rate_policy import RatePolicy

PAISE = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Round a value to currency precision."""
    return Decimal(value).quantize(PAISE, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FinancialBreakdown:
    """Result of a breakdown computation."""

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
    settings_version: int | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def validate_amounts(**amounts: Any) -> dict[str, Decimal]:
    """Normalise monetary inputs and reject negatives.

    Raises:
        InvalidAmount: If any amount is negative or not a number
    """
    cleaned: dict[str, Decimal] = {}
    for field, value in amounts.items():
        if value is None:
            cleaned[field] = ZERO
            continue
        if isinstance(value, bool):
            raise InvalidAmount(field, value)
        try:
            amount = Decimal(str(value))
        except ArithmeticError:
            raise InvalidAmount(field, value)
        if not amount.is_finite() or amount < 0:
            raise InvalidAmount(field, value)
        cleaned[field] = to_money(amount)
    return cleaned


def compute_breakdown(
    base_amount: Decimal,
    cleaning_fee: Decimal,
    extra_guest_charge: Decimal,
    policy: RatePolicy,
    penalties: Decimal = ZERO,
) -> FinancialBreakdown:
    """Compute commission, taxes, fees and net payout for a booking amount.

    Inputs must already have passed validate_amounts; the policy must
    already have passed rate validation.

    Args:
        base_amount: Stay price before add-ons
        cleaning_fee: One-time cleaning fee
        extra_guest_charge: Charge for guests above the base occupancy
        policy: Active rate policy
        penalties: Host penalties to deduct (0 for new computations)

    Returns:
        FinancialBreakdown: Full breakdown
    """
    base_amount = to_money(base_amount)
    cleaning_fee = to_money(cleaning_fee)
    extra_guest_charge = to_money(extra_guest_charge)
    penalties = to_money(penalties)

    total = base_amount
    excluded = ZERO

    if policy.commission_on_cleaning_fee:
        total += cleaning_fee
    else:
        excluded += cleaning_fee

    if policy.commission_on_extra_guests:
        total += extra_guest_charge
    else:
        excluded += extra_guest_charge

    if policy.commission_type == "percentage":
        commission = to_money(total * Decimal(policy.commission_rate) / HUNDRED)
    else:
        commission = to_money(policy.fixed_commission_amount or 0)

    gst = ZERO
    if policy.gst_enabled:
        gst_rate = Decimal(policy.gst_rate)
        gst_base = total + commission if policy.gst_on_commission else total
        if policy.gst_inclusive:
            gst = to_money(gst_base * gst_rate / (HUNDRED + gst_rate))
        else:
            gst = to_money(gst_base * gst_rate / HUNDRED)
            total += gst

    tcs = ZERO
    if policy.tcs_enabled and total >= Decimal(policy.tcs_threshold):
        tcs = to_money(total * Decimal(policy.tcs_rate) / HUNDRED)

    platform_fee = ZERO
    if policy.platform_fee_enabled:
        if policy.platform_fee_type == "percentage":
            platform_fee = to_money(total * Decimal(policy.platform_fee_rate) / HUNDRED)
        else:
            platform_fee = to_money(policy.fixed_platform_fee or 0)

    total_deductions = commission + gst + tcs + platform_fee + penalties

    return FinancialBreakdown(
        base_amount=base_amount,
        cleaning_fee=cleaning_fee,
        extra_guest_charge=extra_guest_charge,
        excluded_addons=excluded,
        total_amount=total,
        commission_amount=commission,
        gst_amount=gst,
        tcs_amount=tcs,
        platform_fee_amount=platform_fee,
        penalties=penalties,
        total_deductions=total_deductions,
        net_payout=total - total_deductions,
        settings_version=policy.version,
    )
