"""Financial audit trail service."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import AuditLog

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    """Convert Decimal/UUID/date values so they fit a JSON column."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(item) for item in value]
    return value


class AuditService:
    """Service for immutable financial audit logging."""

    # Financial actions that require audit logging
    FINANCIAL_ACTIONS = {
        "settings_update",
        "booking_financials_compute",
        "booking_status_update",
        "booking_cancel",
        "payment_status_update",
        "payout_generate",
        "payout_start",
        "payout_process",
        "payout_fail",
        "payout_cancel",
        "payout_adjustment_create",
        "payout_profile_update",
        "refund_request",
        "refund_approve",
        "refund_reject",
        "refund_confirm",
        "dispute_open",
        "dispute_resolve",
        "dispute_reject",
    }

    async def log_financial_action(
        self,
        db: AsyncSession,
        actor_id: UUID,
        action: str,
        resource_type: str,
        resource_id: UUID | None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """Log a financial action (immutable).

        Args:
            db: Database session
            actor_id: Actor performing the action
            action: Action name (e.g., "payout_process")
            resource_type: Resource type (e.g., "payout", "booking")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state
            ip_address: Client IP

        Returns:
            Created audit log entry
        """
        if action not in self.FINANCIAL_ACTIONS:
            logger.warning(f"Audit entry for unregistered action {action}")

        audit = AuditLog(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=_jsonable(old_values) if old_values is not None else None,
            new_values=_jsonable(new_values) if new_values is not None else None,
            ip_address=ip_address,
        )
        db.add(audit)
        return audit

    async def log_status_change(
        self,
        db: AsyncSession,
        actor_id: UUID,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_status: str | None,
        new_status: str,
        **details: Any,
    ) -> AuditLog:
        """Log a status transition with optional extra fields."""
        return await self.log_financial_action(
            db=db,
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values={"status": old_status} if old_status else None,
            new_values={"status": new_status, **details},
        )

    async def list_entries(
        self,
        db: AsyncSession,
        resource_type: str | None = None,
        resource_id: UUID | None = None,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Audit entries, newest first."""
        query = select(AuditLog)
        if resource_type:
            query = query.where(AuditLog.resource_type == resource_type)
        if resource_id:
            query = query.where(AuditLog.resource_id == resource_id)
        result = await db.execute(query.order_by(AuditLog.created_at.desc()).limit(limit))
        return list(result.scalars().all())


audit_service = AuditService()
