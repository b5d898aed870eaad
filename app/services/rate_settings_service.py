"""Rate settings service.

One canonical, versioned settings entity. Calculations always read the
highest version; updates are partial merges written as a new version.
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings as app_settings
from app.core.exceptions import AppException, InvalidRateValue, SettingsNotConfigured
from app.domain.rate_policy import RatePolicy, validate_rate_values
from app.models.settings import RateSettings
from app.services.audit_service import audit_service

logger = logging.getLogger(__name__)

# Fields each settings section may change
CATEGORY_FIELDS: dict[str, tuple[str, ...]] = {
    "commission": (
        "commission_rate",
        "commission_type",
        "fixed_commission_amount",
        "commission_on_cleaning_fee",
        "commission_on_extra_guests",
    ),
    "gst": ("gst_enabled", "gst_rate", "gst_number", "gst_on_commission", "gst_inclusive"),
    "tcs": ("tcs_enabled", "tcs_rate", "tcs_threshold"),
    "platform_fee": (
        "platform_fee_enabled",
        "platform_fee_type",
        "platform_fee_rate",
        "fixed_platform_fee",
    ),
}

SETTINGS_FIELDS = RatePolicy.field_names() + ("gst_number",)

BOOLEAN_FIELDS = (
    "commission_on_cleaning_fee",
    "commission_on_extra_guests",
    "gst_enabled",
    "gst_on_commission",
    "gst_inclusive",
    "tcs_enabled",
    "platform_fee_enabled",
)


def default_rate_values() -> dict[str, Any]:
    """Policy values for the bootstrap version, from configuration."""
    return {
        "commission_rate": app_settings.default_commission_rate,
        "commission_type": "percentage",
        "fixed_commission_amount": None,
        "commission_on_cleaning_fee": app_settings.default_commission_on_cleaning_fee,
        "commission_on_extra_guests": app_settings.default_commission_on_extra_guests,
        "gst_enabled": app_settings.default_gst_enabled,
        "gst_rate": app_settings.default_gst_rate,
        "gst_number": None,
        "gst_on_commission": app_settings.default_gst_on_commission,
        "gst_inclusive": app_settings.default_gst_inclusive,
        "tcs_enabled": app_settings.default_tcs_enabled,
        "tcs_rate": app_settings.default_tcs_rate,
        "tcs_threshold": app_settings.default_tcs_threshold,
        "platform_fee_enabled": app_settings.default_platform_fee_enabled,
        "platform_fee_type": "percentage",
        "platform_fee_rate": app_settings.default_platform_fee_rate,
        "fixed_platform_fee": None,
    }


def to_rate_policy(rate_settings: RateSettings) -> RatePolicy:
    """Immutable policy value for the calculator."""
    return RatePolicy.from_source(rate_settings)


class RateSettingsService:
    """Service for reading and versioning rate settings."""

    async def get_current_settings(self, db: AsyncSession) -> RateSettings | None:
        """Get the highest settings version, if any exists."""
        result = await db.execute(
            select(RateSettings).order_by(RateSettings.version.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def require_current_settings(self, db: AsyncSession) -> RateSettings:
        """Get the current settings or fail the operation.

        Raises:
            SettingsNotConfigured: If no settings version exists
        """
        current = await self.get_current_settings(db)
        if current is None:
            raise SettingsNotConfigured()
        return current

    async def get_current_policy(self, db: AsyncSession) -> RatePolicy:
        return to_rate_policy(await self.require_current_settings(db))

    async def ensure_default_settings(self, db: AsyncSession) -> RateSettings:
        """Seed version 1 from configuration defaults when no settings exist.

        This is the only place defaults are created.
        """
        current = await self.get_current_settings(db)
        if current is not None:
            logger.info(f"Rate settings present (version {current.version})")
            return current

        values = validate_rate_values(default_rate_values())
        seed = RateSettings(version=1, change_note="Default settings", created_by=None, **values)
        try:
            async with db.begin_nested():
                db.add(seed)
        except IntegrityError:
            # Another process seeded first
            logger.info("Rate settings seeded concurrently, using existing version")
            return await self.require_current_settings(db)

        logger.info("Seeded default rate settings (version 1)")
        return seed

    async def update_settings(
        self,
        db: AsyncSession,
        changes: dict[str, Any],
        actor_id: UUID,
        change_note: str | None = None,
    ) -> RateSettings:
        """Merge a partial update onto the current version and store it as a new version.

        Args:
            db: Database session
            changes: Fields to change; omitted (or None) fields keep their value
            actor_id: Admin performing the update
            change_note: Optional free-text reason

        Returns:
            The new current settings version

        Raises:
            SettingsNotConfigured: If there is no version to merge onto
            InvalidRateValue: If the merged values are outside their bounds
        """
        unknown = set(changes) - set(SETTINGS_FIELDS)
        if unknown:
            field = sorted(unknown)[0]
            raise InvalidRateValue(field, changes[field], f"Unknown settings field: {field}")

        current = await self.require_current_settings(db)
        merged = {name: getattr(current, name) for name in SETTINGS_FIELDS}
        applied = {name: value for name, value in changes.items() if value is not None}

        for name in BOOLEAN_FIELDS:
            if name in applied and not isinstance(applied[name], bool):
                raise InvalidRateValue(name, applied[name], f"{name} must be true or false")

        merged.update(applied)
        cleaned = validate_rate_values(merged)

        new_version = RateSettings(
            version=current.version + 1,
            change_note=change_note,
            created_by=actor_id,
            **cleaned,
        )
        try:
            async with db.begin_nested():
                db.add(new_version)
        except IntegrityError:
            raise AppException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Rate settings were updated concurrently; reload and retry",
            )

        await audit_service.log_financial_action(
            db=db,
            actor_id=actor_id,
            action="settings_update",
            resource_type="rate_settings",
            resource_id=new_version.id,
            old_values={
                "version": current.version,
                **{name: getattr(current, name) for name in applied},
            },
            new_values={"version": new_version.version, **applied},
        )
        logger.info(
            f"Rate settings updated to version {new_version.version} by {actor_id}: "
            f"{', '.join(sorted(applied)) or 'no changes'}"
        )
        return new_version

    async def update_category(
        self,
        db: AsyncSession,
        category: str,
        changes: dict[str, Any],
        actor_id: UUID,
        change_note: str | None = None,
    ) -> RateSettings:
        """Update a single settings section (commission, gst, tcs, platform_fee)."""
        allowed = CATEGORY_FIELDS.get(category)
        if allowed is None:
            raise InvalidRateValue("category", category, f"Unknown settings section: {category}")
        outside = set(changes) - set(allowed)
        if outside:
            field = sorted(outside)[0]
            raise InvalidRateValue(
                field, changes[field], f"{field} cannot be changed from the {category} section"
            )
        return await self.update_settings(db, changes, actor_id, change_note)

    async def list_versions(self, db: AsyncSession, limit: int = 50) -> list[RateSettings]:
        """Settings history, newest first."""
        result = await db.execute(
            select(RateSettings).order_by(RateSettings.version.desc()).limit(limit)
        )
        return list(result.scalars().all())


rate_settings_service = RateSettingsService()
