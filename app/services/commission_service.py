"""Commission calculation and financial reporting service.

CRITICAL BUSINESS LOGIC:
- Every amount is derived from the current RateSettings version through
  the calculator in app.domain.financials; no rate is hard-coded here
- A booking's cached breakdown is authoritative once computed; reports
  and payouts reuse it instead of re-deriving with newer rates
- Inputs are validated (non-negative) before reaching the calculator
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.database import utcnow
from app.domain.financials import (
    ZERO,
    FinancialBreakdown,
    compute_breakdown,
    validate_amounts,
)
from app.domain.rate_policy import RatePolicy
from app.models.booking import Booking
from app.services.audit_service import audit_service
from app.services.rate_settings_service import rate_settings_service
from app.utils.validators import period_bounds

logger = logging.getLogger(__name__)

REPORT_GROUPINGS = ("host", "month")


def settlement_amounts(booking: Booking) -> dict[str, Decimal]:
    """Calculator inputs for a booking, net of its discount.

    The discount comes off the base amount, so commission is charged on
    what the guest paid. When the stored components do not add up to the
    charged ``total_amount``, the total is settled as the base with no
    add-ons.

    Raises:
        InvalidAmount: If any stored amount is negative
    """
    amounts = validate_amounts(
        base_amount=booking.base_amount,
        cleaning_fee=booking.cleaning_fee,
        extra_guest_charge=booking.extra_guest_charge,
        discount=booking.discount,
        total_amount=booking.total_amount,
        penalties=booking.penalties,
    )
    base = amounts["base_amount"] - amounts["discount"]
    charged = base + amounts["cleaning_fee"] + amounts["extra_guest_charge"]
    if base >= 0 and charged == amounts["total_amount"]:
        return {
            "base_amount": base,
            "cleaning_fee": amounts["cleaning_fee"],
            "extra_guest_charge": amounts["extra_guest_charge"],
            "penalties": amounts["penalties"],
        }

    logger.warning(
        f"Booking {booking.booking_reference} components ({charged}) do not match "
        f"the charged total {amounts['total_amount']}; settling on the total"
    )
    return {
        "base_amount": amounts["total_amount"],
        "cleaning_fee": ZERO,
        "extra_guest_charge": ZERO,
        "penalties": amounts["penalties"],
    }


def cached_breakdown(booking: Booking) -> FinancialBreakdown:
    """Rebuild the stored breakdown of a booking."""
    inputs = settlement_amounts(booking)
    return FinancialBreakdown(
        base_amount=inputs["base_amount"],
        cleaning_fee=inputs["cleaning_fee"],
        extra_guest_charge=inputs["extra_guest_charge"],
        excluded_addons=booking.financials_excluded_addons or ZERO,
        total_amount=booking.financials_total_amount,
        commission_amount=booking.commission_amount or ZERO,
        gst_amount=booking.gst_amount or ZERO,
        tcs_amount=booking.tcs_amount or ZERO,
        platform_fee_amount=booking.platform_fee_amount or ZERO,
        penalties=inputs["penalties"],
        total_deductions=booking.total_deductions,
        net_payout=booking.net_payout,
        settings_version=booking.financials_settings_version,
    )


def booking_breakdown(booking: Booking, policy: RatePolicy) -> FinancialBreakdown:
    """Breakdown used to settle a booking; reports and payouts share it.

    The cached breakdown wins; otherwise it is computed from the booking's
    discounted components with the given policy.
    """
    if booking.has_cached_financials:
        return cached_breakdown(booking)
    return compute_breakdown(policy=policy, **settlement_amounts(booking))


class CommissionService:
    """Service for booking breakdowns and commission/GST reports."""

    async def calculate(
        self,
        db: AsyncSession,
        base_amount: Any,
        cleaning_fee: Any = None,
        extra_guest_charge: Any = None,
        penalties: Any = None,
    ) -> FinancialBreakdown:
        """Compute a breakdown for arbitrary amounts with the current settings.

        Raises:
            InvalidAmount: If any amount is negative or not a number
            SettingsNotConfigured: If no settings exist
        """
        amounts = validate_amounts(
            base_amount=base_amount,
            cleaning_fee=cleaning_fee,
            extra_guest_charge=extra_guest_charge,
            penalties=penalties,
        )
        policy = await rate_settings_service.get_current_policy(db)
        return compute_breakdown(
            amounts["base_amount"],
            amounts["cleaning_fee"],
            amounts["extra_guest_charge"],
            policy,
            penalties=amounts["penalties"],
        )

    async def compute_booking_financials(
        self,
        db: AsyncSession,
        booking_id: UUID,
        persist: bool = False,
        actor_id: UUID | None = None,
    ) -> FinancialBreakdown:
        """Compute a booking's breakdown from its discounted components and current settings.

        Args:
            db: Database session
            booking_id: Booking to compute
            persist: Cache the breakdown on the booking
            actor_id: Actor requesting persistence (required when persisting)

        Returns:
            FinancialBreakdown: Freshly computed breakdown
        """
        if persist and actor_id is None:
            raise ValidationError("actor_id is required to store booking financials")

        booking = await self._get_booking(db, booking_id)
        inputs = settlement_amounts(booking)
        policy = await rate_settings_service.get_current_policy(db)
        breakdown = compute_breakdown(policy=policy, **inputs)

        if persist:
            self._store_breakdown(booking, breakdown)
            await audit_service.log_financial_action(
                db=db,
                actor_id=actor_id,
                action="booking_financials_compute",
                resource_type="booking",
                resource_id=booking.id,
                new_values={
                    "settings_version": breakdown.settings_version,
                    "total_amount": breakdown.total_amount,
                    "total_deductions": breakdown.total_deductions,
                    "net_payout": breakdown.net_payout,
                },
            )
            await db.flush()
            logger.info(
                f"Stored financials for booking {booking.booking_reference} "
                f"(settings v{breakdown.settings_version}, net {breakdown.net_payout})"
            )

        return breakdown

    def _store_breakdown(self, booking: Booking, breakdown: FinancialBreakdown) -> None:
        booking.commission_amount = breakdown.commission_amount
        booking.gst_amount = breakdown.gst_amount
        booking.tcs_amount = breakdown.tcs_amount
        booking.platform_fee_amount = breakdown.platform_fee_amount
        booking.total_deductions = breakdown.total_deductions
        booking.net_payout = breakdown.net_payout
        booking.financials_excluded_addons = breakdown.excluded_addons
        booking.financials_total_amount = breakdown.total_amount
        booking.financials_settings_version = breakdown.settings_version
        booking.financials_computed_at = utcnow()

    async def _get_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def _paid_bookings(
        self,
        db: AsyncSession,
        period_start: date,
        period_end: date,
        host_id: UUID | None = None,
    ) -> list[Booking]:
        start, end = period_bounds(period_start, period_end)
        query = select(Booking).where(
            Booking.payment_status == "paid",
            Booking.created_at >= start,
            Booking.created_at < end,
        )
        if host_id:
            query = query.where(Booking.host_id == host_id)
        result = await db.execute(query.order_by(Booking.created_at))
        return list(result.scalars().all())

    async def commission_report(
        self,
        db: AsyncSession,
        period_start: date,
        period_end: date,
        group_by: str = "host",
        host_id: UUID | None = None,
    ) -> dict[str, Any]:
        """Commission earned on paid bookings, grouped per host or per month."""
        if group_by not in REPORT_GROUPINGS:
            raise ValidationError(f"group_by must be one of: {', '.join(REPORT_GROUPINGS)}")

        policy = await rate_settings_service.get_current_policy(db)
        bookings = await self._paid_bookings(db, period_start, period_end, host_id)

        groups: dict[str, dict[str, Any]] = defaultdict(
            lambda: {
                "booking_count": 0,
                "total_amount": ZERO,
                "commission_amount": ZERO,
                "platform_fee_amount": ZERO,
                "net_payout": ZERO,
            }
        )
        for booking in bookings:
            breakdown = booking_breakdown(booking, policy)
            key = str(booking.host_id) if group_by == "host" else f"{booking.created_at:%Y-%m}"
            row = groups[key]
            row["booking_count"] += 1
            row["total_amount"] += breakdown.total_amount
            row["commission_amount"] += breakdown.commission_amount
            row["platform_fee_amount"] += breakdown.platform_fee_amount
            row["net_payout"] += breakdown.net_payout

        rows = [{"key": key, **values} for key, values in sorted(groups.items())]
        return {
            "period_start": period_start,
            "period_end": period_end,
            "group_by": group_by,
            "rows": rows,
            "totals": _sum_rows(rows),
        }

    async def gst_report(
        self,
        db: AsyncSession,
        period_start: date,
        period_end: date,
    ) -> dict[str, Any]:
        """GST and TCS collected on paid bookings, per month."""
        current = await rate_settings_service.require_current_settings(db)
        policy = RatePolicy.from_source(current)
        bookings = await self._paid_bookings(db, period_start, period_end)

        months: dict[str, dict[str, Any]] = defaultdict(
            lambda: {
                "booking_count": 0,
                "taxable_amount": ZERO,
                "gst_amount": ZERO,
                "tcs_amount": ZERO,
            }
        )
        for booking in bookings:
            breakdown = booking_breakdown(booking, policy)
            row = months[f"{booking.created_at:%Y-%m}"]
            row["booking_count"] += 1
            row["taxable_amount"] += breakdown.total_amount
            row["gst_amount"] += breakdown.gst_amount
            row["tcs_amount"] += breakdown.tcs_amount

        rows = [{"key": key, **values} for key, values in sorted(months.items())]
        return {
            "period_start": period_start,
            "period_end": period_end,
            "gst_number": current.gst_number,
            "gst_enabled": current.gst_enabled,
            "gst_rate": Decimal(current.gst_rate),
            "rows": rows,
            "totals": _sum_rows(rows),
        }


def _sum_rows(rows: list[dict[str, Any]]) -> dict[str, Any]:
    totals: dict[str, Any] = {}
    for row in rows:
        for field, value in row.items():
            if field == "key":
                continue
            totals[field] = totals.get(field, 0) + value
    return totals


commission_service = CommissionService()
