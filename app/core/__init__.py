"""Core utilities and security modules."""

from app.core.encryption import EncryptionService
from app.core.exceptions import (
    AlreadyProcessed,
    AppException,
    AuthenticationError,
    AuthorizationError,
    InvalidAction,
    InvalidAmount,
    InvalidRateValue,
    InvalidStatusTransition,
    NotFoundError,
    PayoutAlreadyExists,
    PayoutDestinationMissing,
    SettingsNotConfigured,
    ValidationError,
)
from app.core.security import Actor, actor_from_token, create_access_token, verify_token

__all__ = [
    "EncryptionService",
    "AlreadyProcessed",
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidAction",
    "InvalidAmount",
    "InvalidRateValue",
    "InvalidStatusTransition",
    "NotFoundError",
    "PayoutAlreadyExists",
    "PayoutDestinationMissing",
    "SettingsNotConfigured",
    "ValidationError",
    "Actor",
    "actor_from_token",
    "create_access_token",
    "verify_token",
]
