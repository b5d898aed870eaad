"""Dispute and refund state machines.

Dispute: none → pending → resolved | rejected
Refund:  none → pending → approved → processed, none | pending → rejected
"""

from app.core.exceptions import AlreadyProcessed, InvalidAction, InvalidStatusTransition

DISPUTE_TRANSITIONS: dict[str, set[str]] = {
    "none": {"pending"},
    "pending": {"resolved", "rejected"},
    "resolved": set(),  # Terminal state
    "rejected": set(),  # Terminal state
}

DISPUTE_ACTIONS: dict[str, str] = {
    "resolve": "resolved",
    "reject": "rejected",
}

REFUND_TRANSITIONS: dict[str, set[str]] = {
    "none": {"pending", "approved", "rejected"},
    "pending": {"approved", "rejected"},
    "approved": {"processed"},
    "processed": set(),
    # A rejected request can be raised again
    "rejected": {"pending"},
}

REFUND_ACTIONS: dict[str, str] = {
    "approve": "approved",
    "reject": "rejected",
}


def dispute_target_for(action: str) -> str:
    target = DISPUTE_ACTIONS.get(action)
    if target is None:
        raise InvalidAction(action, frozenset(DISPUTE_ACTIONS))
    return target


def refund_target_for(action: str) -> str:
    target = REFUND_ACTIONS.get(action)
    if target is None:
        raise InvalidAction(action, frozenset(REFUND_ACTIONS))
    return target


def assert_dispute_transition(current_status: str, new_status: str) -> None:
    """Validate dispute state transition."""
    if current_status in ("resolved", "rejected"):
        raise AlreadyProcessed(f"Dispute has already been {current_status}")
    allowed = DISPUTE_TRANSITIONS.get(current_status, set())
    if new_status not in allowed:
        raise InvalidStatusTransition("dispute", current_status, new_status)


def assert_refund_transition(current_status: str, new_status: str) -> None:
    """Validate refund state transition."""
    if current_status == "processed":
        raise AlreadyProcessed("Refund has already been processed")
    allowed = REFUND_TRANSITIONS.get(current_status, set())
    if new_status not in allowed:
        raise InvalidStatusTransition("refund", current_status, new_status)
