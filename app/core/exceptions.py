"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    code: str = "error"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    code = "validation_error"

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    code = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    code = "authentication_failed"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    code = "forbidden"

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    code = "rate_limited"

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=detail,
            headers={"Retry-After": "60"},
        )


# ============ SETTLEMENT DOMAIN ============


class SettingsNotConfigured(AppException):
    """No rate settings version exists."""

    code = "settings_not_configured"

    def __init__(self, detail: str = "Rate settings are not configured") -> None:
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class InvalidRateValue(ValidationError):
    """A rate or fixed amount outside its allowed bounds."""

    code = "invalid_rate_value"

    def __init__(self, field: str, value: Any, detail: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(
            detail or f"Invalid value for {field}: {value}",
            errors=[{"field": field, "value": str(value)}],
        )


class InvalidAmount(ValidationError):
    """A monetary input that cannot enter a calculation."""

    code = "invalid_amount"

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        super().__init__(
            f"{field} must be a non-negative amount, got {value}",
            errors=[{"field": field, "value": str(value)}],
        )


class PayoutAlreadyExists(AppException):
    """A payout record already exists for the (host, booking) pair."""

    code = "payout_already_exists"

    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Payout already exists for booking {booking_id}",
        )


class AlreadyProcessed(AppException):
    """The record reached a terminal state and cannot change."""

    code = "already_processed"

    def __init__(self, detail: str = "This record has already been processed") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidAction(AppException):
    """Unknown action verb for a transition."""

    code = "invalid_action"

    def __init__(self, action: str, allowed: set[str] | frozenset[str]) -> None:
        self.action = action
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid action '{action}'. Must be one of: {', '.join(sorted(allowed))}",
        )


class InvalidStatusTransition(AppException):
    """A state transition not allowed by the state table."""

    code = "invalid_status_transition"

    def __init__(self, entity: str, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invalid {entity} transition: {current} → {target}",
        )


class PayoutDestinationMissing(AppException):
    """The host has no usable bank or UPI destination."""

    code = "payout_destination_missing"

    def __init__(self, host_id: str) -> None:
        self.host_id = host_id
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Host {host_id} has no payout destination configured",
        )
