"""Payout record state machine.

States:
- pending: Created by payout generation, not yet sent
- processing: Transfer initiated with the bank/UPI rail
- completed: Transfer confirmed (terminal)
- failed: Transfer failed; the same record may be retried
- cancelled: Withdrawn by an admin (terminal)
"""

from app.core.exceptions import AlreadyProcessed, InvalidAction, InvalidStatusTransition

PAYOUT_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "completed", "failed", "cancelled"},
    "processing": {"completed", "failed", "cancelled"},
    "failed": {"processing", "completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

# Action verb → target status
PAYOUT_ACTIONS: dict[str, str] = {
    "start": "processing",
    "process": "completed",
    "fail": "failed",
    "cancel": "cancelled",
}

TERMINAL_PAYOUT_STATUSES = frozenset({"completed", "cancelled"})


def target_status_for(action: str) -> str:
    """Resolve an action verb to its target status.

    Raises:
        InvalidAction: If the verb is unknown
    """
    target = PAYOUT_ACTIONS.get(action)
    if target is None:
        raise InvalidAction(action, frozenset(PAYOUT_ACTIONS))
    return target


def allowed_sources(target: str) -> set[str]:
    """Statuses from which ``target`` may be entered."""
    return {source for source, targets in PAYOUT_TRANSITIONS.items() if target in targets}


def assert_payout_transition(current: str, target: str) -> None:
    """Validate payout state transition.

    Args:
        current: Current payout status
        target: Target payout status

    Raises:
        AlreadyProcessed: If the payout is already completed
        InvalidStatusTransition: If transition is not allowed
    """
    if current == "completed":
        raise AlreadyProcessed("Payout has already been processed")
    allowed = PAYOUT_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransition("payout", current, target)


def can_generate_payout(booking_status: str, payment_status: str) -> tuple[bool, str | None]:
    """Check if a booking is eligible for a payout record.

    Returns:
        Tuple of (eligible, error_message)
    """
    if booking_status == "cancelled":
        return False, "Cannot create payout for cancelled booking"

    if payment_status == "refunded":
        return False, "Cannot create payout for refunded booking"

    if payment_status != "paid":
        return False, "Cannot create payout - payment not completed"

    if booking_status != "completed":
        return False, f"Cannot create payout - booking status is {booking_status}"

    return True, None
