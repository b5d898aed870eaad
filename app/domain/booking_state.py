"""Booking state machine."""

from app.core.exceptions import InvalidStatusTransition

BOOKING_TRANSITIONS = {
    "upcoming": {"ongoing", "completed", "cancelled"},
    "ongoing": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

# Older records used "pending" for bookings that had not started
BOOKING_STATUS_ALIASES = {"pending": "upcoming"}


def normalize_booking_status(status: str) -> str:
    return BOOKING_STATUS_ALIASES.get(status, status)


def assert_booking_transition(current: str, target: str) -> None:
    current = normalize_booking_status(current)
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidStatusTransition("booking", current, target)
