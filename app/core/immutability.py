"""Append-only enforcement for financial records using SQLAlchemy events."""

import logging

from sqlalchemy import event

from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_registered = False


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify an append-only financial record."""

    code = "immutability_violation"

    def __init__(self, model_name: str, operation: str, record_id: str):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        super().__init__(
            f"Immutability violation: Cannot {operation} {model_name} record {record_id}. "
            "Financial records are append-only."
        )


def _guard(model, operation: str):
    def listener(mapper, connection, target):
        logger.error(
            f"IMMUTABILITY_VIOLATION: Attempted to {operation} {model.__name__} "
            f"record_id={target.id}"
        )
        raise ImmutabilityViolationError(model.__name__, operation, str(target.id))

    return listener


def register_immutability_enforcement() -> None:
    """Register before_update / before_delete guards on append-only models.

    Safe to call more than once; listeners are attached a single time.
    """
    global _registered
    if _registered:
        return

    from app.models.admin import AuditLog
    from app.models.payout import PayoutAdjustment
    from app.models.settings import RateSettings

    for model in (AuditLog, PayoutAdjustment, RateSettings):
        event.listen(model, "before_update", _guard(model, "UPDATE"))
        event.listen(model, "before_delete", _guard(model, "DELETE"))

    _registered = True
    logger.info("Immutability enforcement registered for financial records")
