"""Payment state machine."""

from app.core.exceptions import InvalidStatusTransition

PAYMENT_TRANSITIONS = {
    "pending": {"paid", "failed"},
    "paid": {"refunded"},
    "failed": {"pending"},
    "refunded": set(),
}


def assert_payment_transition(current: str, target: str) -> None:
    allowed = PAYMENT_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransition("payment", current, target)
