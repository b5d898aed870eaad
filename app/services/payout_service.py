"""Host payout generation and lifecycle service.

Generation is idempotent per (host, booking): the unique constraint on
payouts is authoritative, the pre-check only lets a re-run report skips.
Each insert runs in its own SAVEPOINT so one bad booking never undoes the
payouts already created in the same batch.

Status transitions are enforced with a conditional UPDATE on the current
status, never read-then-write.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.encryption import decrypt_account_number, encrypt_account_number
from app.core.exceptions import (
    AppException,
    InvalidAction,
    InvalidStatusTransition,
    NotFoundError,
    PayoutAlreadyExists,
    PayoutDestinationMissing,
    ValidationError,
)
from app.database import utcnow
from app.domain.financials import ZERO, to_money
from app.domain.payout_state import (
    PAYOUT_TRANSITIONS,
    allowed_sources,
    assert_payout_transition,
    can_generate_payout,
    target_status_for,
)
from app.domain.rate_policy import RatePolicy
from app.models.booking import Booking
from app.models.host import HostPayoutProfile
from app.models.payout import PayoutAdjustment, PayoutRecord
from app.services.audit_service import audit_service
from app.services.commission_service import booking_breakdown
from app.services.rate_settings_service import rate_settings_service, to_rate_policy
from app.utils.validators import (
    period_bounds,
    validate_account_number,
    validate_ifsc,
    validate_upi_id,
)

logger = logging.getLogger(__name__)

PAYOUT_METHODS = ("bank_transfer", "upi", "wallet")


@dataclass(frozen=True)
class PayoutDestination:
    """Resolved destination copied onto each generated payout."""

    payout_method: str
    account_holder_name: str | None = None
    bank_name: str | None = None
    account_number_encrypted: bytes | None = None
    account_number_last4: str | None = None
    ifsc_code: str | None = None
    upi_id: str | None = None
    wallet_id: str | None = None


@dataclass
class PayoutGenerationItem:
    """Outcome for one booking in a generation batch."""

    booking_id: UUID
    booking_reference: str
    status: str  # created, skipped, failed
    reason: str | None = None
    payout_id: UUID | None = None
    net_payout: Decimal | None = None


@dataclass
class PayoutGenerationResult:
    """Per-booking results of one generate_payouts call."""

    host_id: UUID
    period_start: date
    period_end: date
    items: list[PayoutGenerationItem] = field(default_factory=list)
    payouts: list[PayoutRecord] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for item in self.items if item.status == status)

    @property
    def created_count(self) -> int:
        return self._count("created")

    @property
    def skipped_count(self) -> int:
        return self._count("skipped")

    @property
    def failed_count(self) -> int:
        return self._count("failed")

    @property
    def total_net_payout(self) -> Decimal:
        return sum((payout.net_payout for payout in self.payouts), ZERO)


class PayoutService:
    """Service for payout generation, transitions and reporting."""

    # ============ DESTINATION ============

    async def resolve_destination(self, db: AsyncSession, host_id: UUID) -> PayoutDestination:
        """Resolve where a host's payouts are sent.

        The host's preferred method is used when complete; otherwise any
        complete bank or UPI destination.

        Raises:
            PayoutDestinationMissing: If no usable destination is configured
        """
        profile = await self.get_payout_profile(db, host_id)
        if profile is None:
            raise PayoutDestinationMissing(str(host_id))

        method = profile.payout_method
        if method == "wallet" and profile.wallet_id:
            return PayoutDestination(
                payout_method="wallet",
                account_holder_name=profile.account_holder_name,
                wallet_id=profile.wallet_id,
            )
        if method == "upi" and profile.has_upi_details:
            return self._upi_destination(profile)
        if profile.has_bank_details:
            return self._bank_destination(profile)
        if profile.has_upi_details:
            return self._upi_destination(profile)

        raise PayoutDestinationMissing(str(host_id))

    def _bank_destination(self, profile: HostPayoutProfile) -> PayoutDestination:
        account_number = decrypt_account_number(profile.account_number_encrypted)
        return PayoutDestination(
            payout_method="bank_transfer",
            account_holder_name=profile.account_holder_name,
            bank_name=profile.bank_name,
            account_number_encrypted=profile.account_number_encrypted,
            account_number_last4=account_number[-4:],
            ifsc_code=profile.ifsc_code,
        )

    def _upi_destination(self, profile: HostPayoutProfile) -> PayoutDestination:
        return PayoutDestination(
            payout_method="upi",
            account_holder_name=profile.account_holder_name,
            upi_id=profile.upi_id,
        )

    async def get_payout_profile(
        self, db: AsyncSession, host_id: UUID
    ) -> HostPayoutProfile | None:
        result = await db.execute(
            select(HostPayoutProfile).where(HostPayoutProfile.host_id == host_id)
        )
        return result.scalar_one_or_none()

    async def update_payout_profile(
        self,
        db: AsyncSession,
        host_id: UUID,
        changes: dict[str, Any],
        actor_id: UUID,
    ) -> HostPayoutProfile:
        """Create or update a host's payout destination.

        The account number is stored encrypted; only the last four digits
        are ever returned.

        Raises:
            ValidationError: If the method, IFSC, UPI ID or account number is malformed
        """
        method = changes.get("payout_method")
        if method is not None and method not in PAYOUT_METHODS:
            raise ValidationError(f"Unknown payout method: {method}")
        if changes.get("ifsc_code"):
            changes["ifsc_code"] = changes["ifsc_code"].upper()
            if not validate_ifsc(changes["ifsc_code"]):
                raise ValidationError("Invalid IFSC code")
        if changes.get("upi_id") and not validate_upi_id(changes["upi_id"]):
            raise ValidationError("Invalid UPI ID")

        account_number = changes.pop("account_number", None)
        if account_number is not None and not validate_account_number(account_number):
            raise ValidationError("Account number must be 9 to 18 digits")

        profile = await self.get_payout_profile(db, host_id)
        if profile is None:
            profile = HostPayoutProfile(host_id=host_id)
            db.add(profile)

        for key, value in changes.items():
            setattr(profile, key, value)
        if account_number is not None:
            profile.account_number_encrypted = encrypt_account_number(account_number)
        await db.flush()

        await audit_service.log_financial_action(
            db=db,
            actor_id=actor_id,
            action="payout_profile_update",
            resource_type="host_payout_profile",
            resource_id=profile.id,
            new_values={
                **changes,
                "account_number_updated": account_number is not None,
            },
        )
        logger.info(f"Payout profile updated for host {host_id}")
        return profile

    # ============ GENERATION ============

    async def find_bookings_for_payout(
        self,
        db: AsyncSession,
        host_id: UUID,
        period_start: date,
        period_end: date,
    ) -> list[Booking]:
        """Completed and paid bookings of a host created within the inclusive period."""
        start, end = period_bounds(period_start, period_end)
        result = await db.execute(
            select(Booking)
            .where(
                Booking.host_id == host_id,
                Booking.booking_status == "completed",
                Booking.payment_status == "paid",
                Booking.created_at >= start,
                Booking.created_at < end,
            )
            .order_by(Booking.created_at)
        )
        return list(result.scalars().all())

    async def find_existing_payouts(
        self,
        db: AsyncSession,
        host_id: UUID,
        booking_ids: list[UUID],
    ) -> set[UUID]:
        """Booking ids among ``booking_ids`` that already have a payout for the host."""
        if not booking_ids:
            return set()
        result = await db.execute(
            select(PayoutRecord.booking_id).where(
                PayoutRecord.host_id == host_id,
                PayoutRecord.booking_id.in_(booking_ids),
            )
        )
        return set(result.scalars().all())

    async def generate_payouts(
        self,
        db: AsyncSession,
        host_id: UUID,
        period_start: date,
        period_end: date,
        actor_id: UUID,
    ) -> PayoutGenerationResult:
        """Create one pending payout per eligible booking of a host.

        Args:
            db: Database session
            host_id: Host to settle
            period_start: First day of the period (inclusive)
            period_end: Last day of the period (inclusive)
            actor_id: Admin running the generation

        Returns:
            PayoutGenerationResult: created / skipped / failed item per booking

        Raises:
            SettingsNotConfigured: If no rate settings exist
            PayoutDestinationMissing: If the host has no usable destination
        """
        policy = to_rate_policy(await rate_settings_service.require_current_settings(db))
        destination = await self.resolve_destination(db, host_id)

        bookings = await self.find_bookings_for_payout(db, host_id, period_start, period_end)
        existing = await self.find_existing_payouts(db, host_id, [b.id for b in bookings])

        result = PayoutGenerationResult(
            host_id=host_id, period_start=period_start, period_end=period_end
        )

        for booking in bookings:
            item = PayoutGenerationItem(
                booking_id=booking.id,
                booking_reference=booking.booking_reference,
                status="created",
            )
            result.items.append(item)

            if booking.id in existing:
                item.status = "skipped"
                item.reason = PayoutAlreadyExists.code
                continue

            try:
                # Payout and its refund adjustment land together or not at all
                async with db.begin_nested():
                    payout = await self._insert_payout(
                        db, booking, policy, destination, period_start, period_end, actor_id
                    )
                    if booking.refund_status in ("approved", "processed") and booking.refund_amount:
                        await self.record_refund_adjustment(db, booking, actor_id)
            except PayoutAlreadyExists:
                item.status = "skipped"
                item.reason = PayoutAlreadyExists.code
                continue
            except AppException as e:
                item.status = "failed"
                item.reason = str(e.detail)
                logger.warning(
                    f"Payout generation failed for booking {booking.booking_reference}: {e.detail}"
                )
                continue
            except Exception as e:
                item.status = "failed"
                item.reason = str(e)
                logger.exception(
                    f"Unexpected error generating payout for booking {booking.booking_reference}"
                )
                continue

            item.payout_id = payout.id
            item.net_payout = payout.net_payout
            result.payouts.append(payout)

        await audit_service.log_financial_action(
            db=db,
            actor_id=actor_id,
            action="payout_generate",
            resource_type="host",
            resource_id=host_id,
            new_values={
                "period_start": period_start,
                "period_end": period_end,
                "created": result.created_count,
                "skipped": result.skipped_count,
                "failed": result.failed_count,
                "payout_ids": [payout.id for payout in result.payouts],
            },
        )
        logger.info(
            f"Payout generation for host {host_id} {period_start}..{period_end}: "
            f"created={result.created_count} skipped={result.skipped_count} "
            f"failed={result.failed_count}"
        )
        return result

    async def _insert_payout(
        self,
        db: AsyncSession,
        booking: Booking,
        policy: RatePolicy,
        destination: PayoutDestination,
        period_start: date,
        period_end: date,
        actor_id: UUID,
    ) -> PayoutRecord:
        """Insert a single payout inside a SAVEPOINT.

        Raises:
            PayoutAlreadyExists: If the (host, booking) constraint rejects the insert
        """
        eligible, error = can_generate_payout(booking.booking_status, booking.payment_status)
        if not eligible:
            raise ValidationError(error)

        breakdown = booking_breakdown(booking, policy)
        payout = PayoutRecord(
            host_id=booking.host_id,
            booking_id=booking.id,
            booking_reference=booking.booking_reference,
            period_start=period_start,
            period_end=period_end,
            total_booking_amount=breakdown.total_amount,
            commission_amount=breakdown.commission_amount,
            gst_amount=breakdown.gst_amount,
            tcs_amount=breakdown.tcs_amount,
            platform_fee_amount=breakdown.platform_fee_amount,
            penalties=breakdown.penalties,
            total_deductions=breakdown.total_deductions,
            net_payout=breakdown.net_payout,
            currency=booking.currency,
            settings_version=breakdown.settings_version,
            payout_method=destination.payout_method,
            bank_name=destination.bank_name,
            account_number_encrypted=destination.account_number_encrypted,
            account_number_last4=destination.account_number_last4,
            ifsc_code=destination.ifsc_code,
            account_holder_name=destination.account_holder_name,
            upi_id=destination.upi_id,
            wallet_id=destination.wallet_id,
            status="pending",
            retry_count=0,
            created_by=actor_id,
        )
        try:
            async with db.begin_nested():
                db.add(payout)
        except IntegrityError:
            raise PayoutAlreadyExists(str(booking.id))
        return payout

    # ============ TRANSITIONS ============

    async def transition_payout(
        self,
        db: AsyncSession,
        payout_id: UUID,
        action: str,
        actor_id: UUID,
        transaction_id: str | None = None,
        notes: str | None = None,
    ) -> PayoutRecord:
        """Apply an action (start, process, fail, cancel) to a payout.

        Args:
            db: Database session
            payout_id: Payout to transition
            action: Action verb
            actor_id: Admin performing the action
            transaction_id: Bank/UPI reference, required for ``process``
            notes: Failure reason for ``fail``; free-text notes otherwise

        Returns:
            PayoutRecord: The updated record

        Raises:
            InvalidAction: Unknown action verb
            ValidationError: ``process`` without a transaction id
            AlreadyProcessed: The payout is already completed
            InvalidStatusTransition: The action is not allowed from the current status
            NotFoundError: No such payout
        """
        try:
            target = target_status_for(action)
        except InvalidAction:
            logger.warning(f"Rejected payout action '{action}' on {payout_id} by {actor_id}")
            raise

        transaction_id = transaction_id.strip() if transaction_id else None
        if action == "process" and not transaction_id:
            raise ValidationError("transaction_id is required to process a payout")

        old_status = await db.scalar(select(PayoutRecord.status).where(PayoutRecord.id == payout_id))
        if old_status is None:
            raise NotFoundError("Payout", str(payout_id))

        now = utcnow()
        values: dict[str, Any] = {"status": target, "updated_at": now}
        if target == "completed":
            values.update(transaction_id=transaction_id, processed_at=now, processed_by=actor_id)
            if notes:
                values["notes"] = notes
        elif target == "failed":
            values.update(
                failure_reason=notes,
                retry_count=PayoutRecord.retry_count + 1,
                last_retry_at=now,
            )
        elif notes:
            values["notes"] = notes

        stmt = (
            update(PayoutRecord)
            .where(
                PayoutRecord.id == payout_id,
                PayoutRecord.status.in_(allowed_sources(target)),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            async with db.begin_nested():
                outcome = await db.execute(stmt)
        except IntegrityError:
            raise ValidationError(f"transaction_id {transaction_id} is already used by another payout")

        if outcome.rowcount == 0:
            current = await db.scalar(select(PayoutRecord.status).where(PayoutRecord.id == payout_id))
            if current is None:
                raise NotFoundError("Payout", str(payout_id))
            logger.warning(
                f"Rejected payout action '{action}' on {payout_id}: status is {current}"
            )
            assert_payout_transition(current, target)
            raise InvalidStatusTransition("payout", current, target)

        payout = await self.get_payout(db, payout_id, refresh=True)
        await audit_service.log_status_change(
            db=db,
            actor_id=actor_id,
            action=f"payout_{action}",
            resource_type="payout",
            resource_id=payout.id,
            old_status=old_status,
            new_status=target,
            net_payout=payout.net_payout,
            host_id=payout.host_id,
            transaction_id=payout.transaction_id,
            retry_count=payout.retry_count,
        )
        logger.info(f"Payout {payout.id} {old_status} -> {target} by {actor_id}")
        return payout

    async def get_payout(
        self, db: AsyncSession, payout_id: UUID, refresh: bool = False
    ) -> PayoutRecord:
        """Get payout by ID or raise NotFoundError."""
        query = select(PayoutRecord).where(PayoutRecord.id == payout_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        payout = result.scalar_one_or_none()
        if not payout:
            raise NotFoundError("Payout", str(payout_id))
        return payout

    # ============ ADJUSTMENTS ============

    async def record_refund_adjustment(
        self,
        db: AsyncSession,
        booking: Booking,
        actor_id: UUID,
    ) -> PayoutAdjustment | None:
        """Append a compensating entry for a refund on a booking that has a payout.

        The payout record itself is never changed. The adjustment is the
        refund capped at the payout's net amount, recorded once per payout.
        Returns None when the booking has no (non-cancelled) payout.
        """
        result = await db.execute(
            select(PayoutRecord).where(
                PayoutRecord.booking_id == booking.id,
                PayoutRecord.host_id == booking.host_id,
                PayoutRecord.status != "cancelled",
            )
        )
        payout = result.scalar_one_or_none()
        if payout is None:
            return None

        source_reference = str(booking.id)
        existing = await db.execute(
            select(PayoutAdjustment).where(
                PayoutAdjustment.payout_id == payout.id,
                PayoutAdjustment.source == "refund",
                PayoutAdjustment.source_reference == source_reference,
            )
        )
        adjustment = existing.scalar_one_or_none()
        if adjustment is not None:
            return adjustment

        amount = min(to_money(booking.refund_amount), to_money(payout.net_payout))
        if amount <= 0:
            return None

        adjustment = PayoutAdjustment(
            payout_id=payout.id,
            booking_id=booking.id,
            host_id=payout.host_id,
            amount=-amount,
            source="refund",
            source_reference=source_reference,
            reason=booking.refund_reason,
            created_by=actor_id,
        )
        try:
            async with db.begin_nested():
                db.add(adjustment)
        except IntegrityError:
            # Recorded concurrently
            existing = await db.execute(
                select(PayoutAdjustment).where(
                    PayoutAdjustment.payout_id == payout.id,
                    PayoutAdjustment.source == "refund",
                    PayoutAdjustment.source_reference == source_reference,
                )
            )
            return existing.scalar_one()

        await audit_service.log_financial_action(
            db=db,
            actor_id=actor_id,
            action="payout_adjustment_create",
            resource_type="payout",
            resource_id=payout.id,
            new_values={
                "adjustment_id": adjustment.id,
                "amount": adjustment.amount,
                "source": "refund",
                "booking_id": booking.id,
                "payout_status": payout.status,
            },
        )
        logger.info(
            f"Refund adjustment {adjustment.amount} recorded against payout {payout.id} "
            f"(booking {booking.booking_reference}, payout status {payout.status})"
        )
        return adjustment

    async def list_adjustments(
        self,
        db: AsyncSession,
        payout_id: UUID | None = None,
        host_id: UUID | None = None,
    ) -> list[PayoutAdjustment]:
        query = select(PayoutAdjustment)
        if payout_id:
            query = query.where(PayoutAdjustment.payout_id == payout_id)
        if host_id:
            query = query.where(PayoutAdjustment.host_id == host_id)
        result = await db.execute(query.order_by(PayoutAdjustment.created_at.desc()))
        return list(result.scalars().all())

    # ============ LISTING & REPORTS ============

    def _filtered(
        self,
        query,
        status: str | None = None,
        host_id: UUID | None = None,
        payout_method: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ):
        if status:
            if status not in PAYOUT_TRANSITIONS:
                raise ValidationError(f"Unknown payout status: {status}")
            query = query.where(PayoutRecord.status == status)
        if host_id:
            query = query.where(PayoutRecord.host_id == host_id)
        if payout_method:
            if payout_method not in PAYOUT_METHODS:
                raise ValidationError(f"Unknown payout method: {payout_method}")
            query = query.where(PayoutRecord.payout_method == payout_method)
        if date_from and date_to:
            start, end = period_bounds(date_from, date_to)
            query = query.where(PayoutRecord.created_at >= start, PayoutRecord.created_at < end)
        elif date_from:
            start, _ = period_bounds(date_from, date_from)
            query = query.where(PayoutRecord.created_at >= start)
        elif date_to:
            _, end = period_bounds(date_to, date_to)
            query = query.where(PayoutRecord.created_at < end)
        return query

    async def list_payouts(
        self,
        db: AsyncSession,
        status: str | None = None,
        host_id: UUID | None = None,
        payout_method: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[PayoutRecord], int, Decimal]:
        """Filtered, paginated payouts with the total count and net amount."""
        filters = dict(
            status=status,
            host_id=host_id,
            payout_method=payout_method,
            date_from=date_from,
            date_to=date_to,
        )
        totals = await db.execute(
            self._filtered(
                select(func.count(PayoutRecord.id), func.coalesce(func.sum(PayoutRecord.net_payout), 0)),
                **filters,
            )
        )
        total, total_amount = totals.one()

        result = await db.execute(
            self._filtered(select(PayoutRecord), **filters)
            .order_by(PayoutRecord.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total or 0, to_money(total_amount or 0)

    async def payout_statistics(
        self, db: AsyncSession, host_id: UUID | None = None
    ) -> dict[str, Any]:
        """Counts and net amounts per status."""
        query = select(
            PayoutRecord.status,
            func.count(PayoutRecord.id),
            func.coalesce(func.sum(PayoutRecord.net_payout), 0),
        ).group_by(PayoutRecord.status)
        if host_id:
            query = query.where(PayoutRecord.host_id == host_id)
        result = await db.execute(query)

        by_status = {
            status: {"count": 0, "amount": ZERO} for status in PAYOUT_TRANSITIONS
        }
        for status, count, amount in result.all():
            by_status[status] = {"count": count, "amount": to_money(amount)}

        return {
            "by_status": by_status,
            "total_count": sum(row["count"] for row in by_status.values()),
            "total_amount": sum((row["amount"] for row in by_status.values()), ZERO),
            "outstanding_amount": by_status["pending"]["amount"]
            + by_status["processing"]["amount"]
            + by_status["failed"]["amount"],
        }

    async def host_payout_summary(self, db: AsyncSession, host_id: UUID) -> dict[str, Any]:
        """Totals and monthly breakdown of a host's payouts."""
        result = await db.execute(
            select(PayoutRecord)
            .where(PayoutRecord.host_id == host_id)
            .order_by(PayoutRecord.created_at)
        )
        payouts = list(result.scalars().all())

        months: dict[str, dict[str, Any]] = defaultdict(
            lambda: {"payout_count": 0, "net_payout": ZERO, "paid_amount": ZERO, "deductions": ZERO}
        )
        for payout in payouts:
            row = months[f"{payout.created_at:%Y-%m}"]
            row["payout_count"] += 1
            row["net_payout"] += payout.net_payout
            row["deductions"] += payout.total_deductions
            if payout.status == "completed":
                row["paid_amount"] += payout.net_payout

        adjustments = await db.scalar(
            select(func.coalesce(func.sum(PayoutAdjustment.amount), 0)).where(
                PayoutAdjustment.host_id == host_id
            )
        )

        def total_for(*statuses: str) -> Decimal:
            return sum((p.net_payout for p in payouts if p.status in statuses), ZERO)

        return {
            "host_id": host_id,
            "payout_count": len(payouts),
            "total_paid": total_for("completed"),
            "total_pending": total_for("pending", "processing"),
            "total_failed": total_for("failed"),
            "total_adjustments": to_money(adjustments or 0),
            "last_payout_at": max(
                (p.processed_at for p in payouts if p.processed_at), default=None
            ),
            "monthly": [{"month": key, **values} for key, values in sorted(months.items())],
        }

    async def export_payout_report(
        self,
        db: AsyncSession,
        status: str | None = None,
        host_id: UUID | None = None,
        payout_method: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[dict[str, Any]]:
        """Flat rows for reconciliation with the bank statement."""
        result = await db.execute(
            self._filtered(
                select(PayoutRecord),
                status=status,
                host_id=host_id,
                payout_method=payout_method,
                date_from=date_from,
                date_to=date_to,
            ).order_by(PayoutRecord.created_at)
        )
        return [
            {
                "payout_id": payout.id,
                "booking_reference": payout.booking_reference,
                "host_id": payout.host_id,
                "period_start": payout.period_start,
                "period_end": payout.period_end,
                "total_booking_amount": payout.total_booking_amount,
                "commission_amount": payout.commission_amount,
                "gst_amount": payout.gst_amount,
                "tcs_amount": payout.tcs_amount,
                "platform_fee_amount": payout.platform_fee_amount,
                "penalties": payout.penalties,
                "total_deductions": payout.total_deductions,
                "net_payout": payout.net_payout,
                "payout_method": payout.payout_method,
                "destination": describe_destination(payout),
                "status": payout.status,
                "transaction_id": payout.transaction_id,
                "retry_count": payout.retry_count,
                "created_at": payout.created_at,
                "processed_at": payout.processed_at,
            }
            for payout in result.scalars().all()
        ]


def describe_destination(payout: PayoutRecord) -> str | None:
    """Masked destination for display and exports."""
    if payout.payout_method == "bank_transfer" and payout.account_number_last4:
        return f"{payout.bank_name or 'Bank'} XXXX{payout.account_number_last4} ({payout.ifsc_code})"
    if payout.payout_method == "upi":
        return payout.upi_id
    if payout.payout_method == "wallet":
        return payout.wallet_id
    return None


payout_service = PayoutService()
