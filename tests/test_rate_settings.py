"""Versioned rate settings: bootstrap, partial updates, history, immutability."""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.core.exceptions import InvalidRateValue, SettingsNotConfigured
from app.core.immutability import ImmutabilityViolationError
from app.models.admin import AuditLog
from app.models.settings import RateSettings
from app.services.commission_service import commission_service
from app.services.rate_settings_service import rate_settings_service


async def test_calculation_requires_settings(db):
    with pytest.raises(SettingsNotConfigured):
        await commission_service.calculate(db, base_amount=Decimal("1000"))


async def test_bootstrap_seeds_configured_defaults_once(db):
    first = await rate_settings_service.ensure_default_settings(db)
    second = await rate_settings_service.ensure_default_settings(db)
    await db.commit()

    assert first.version == 1
    assert second.id == first.id
    assert first.commission_rate == Decimal("10")
    assert first.gst_enabled is False
    assert first.gst_inclusive is True
    assert first.tcs_threshold == Decimal("7000")

    count = (await db.execute(select(RateSettings))).scalars().all()
    assert len(count) == 1


async def test_partial_update_writes_new_version(db, rate_settings, admin_id):
    updated = await rate_settings_service.update_settings(
        db,
        {"gst_enabled": True, "gst_rate": Decimal("12"), "commission_rate": None},
        actor_id=admin_id,
        change_note="Enable GST",
    )
    await db.commit()

    assert updated.version == 2
    assert updated.gst_enabled is True
    assert updated.gst_rate == Decimal("12")
    # None means unchanged
    assert updated.commission_rate == rate_settings.commission_rate
    assert updated.created_by == admin_id

    current = await rate_settings_service.get_current_settings(db)
    assert current.id == updated.id

    history = await rate_settings_service.list_versions(db)
    assert [v.version for v in history] == [2, 1]
    assert history[1].gst_enabled is False


async def test_update_is_audited(db, rate_settings, admin_id):
    await rate_settings_service.update_settings(
        db, {"commission_rate": Decimal("12.5")}, actor_id=admin_id
    )
    await db.commit()

    entries = (
        await db.execute(select(AuditLog).where(AuditLog.action == "settings_update"))
    ).scalars().all()
    assert len(entries) == 1
    assert entries[0].actor_id == admin_id
    assert entries[0].old_values["version"] == 1
    assert Decimal(entries[0].old_values["commission_rate"]) == Decimal("10")
    assert entries[0].new_values["version"] == 2
    assert Decimal(entries[0].new_values["commission_rate"]) == Decimal("12.5")


@pytest.mark.parametrize(
    "changes",
    [
        {"commission_rate": Decimal("75")},
        {"gst_rate": Decimal("-1")},
        {"commission_type": "fixed"},
        {"gst_enabled": "yes"},
        {"favourite_colour": "blue"},
    ],
)
async def test_invalid_update_keeps_current_version(db, rate_settings, admin_id, changes):
    with pytest.raises(InvalidRateValue):
        await rate_settings_service.update_settings(db, changes, actor_id=admin_id)
    await db.rollback()

    current = await rate_settings_service.get_current_settings(db)
    assert current.version == 1


async def test_category_update_is_restricted_to_its_fields(db, rate_settings, admin_id):
    with pytest.raises(InvalidRateValue):
        await rate_settings_service.update_category(
            db, "tcs", {"gst_rate": Decimal("5")}, actor_id=admin_id
        )

    updated = await rate_settings_service.update_category(
        db, "tcs", {"tcs_enabled": True, "tcs_threshold": Decimal("5000")}, actor_id=admin_id
    )
    assert updated.tcs_enabled is True
    assert updated.tcs_threshold == Decimal("5000")


async def test_calculation_uses_latest_version(db, rate_settings, admin_id):
    await rate_settings_service.update_settings(
        db, {"commission_rate": Decimal("20")}, actor_id=admin_id
    )
    await db.commit()

    breakdown = await commission_service.calculate(db, base_amount=Decimal("1000"))

    assert breakdown.commission_amount == Decimal("200.00")
    assert breakdown.settings_version == 2


async def test_settings_versions_cannot_be_modified(db, rate_settings):
    rate_settings.commission_rate = Decimal("30")

    with pytest.raises(ImmutabilityViolationError):
        await db.flush()
    await db.rollback()


async def test_audit_entries_cannot_be_deleted(db, rate_settings, admin_id):
    await rate_settings_service.update_settings(
        db, {"tcs_enabled": True}, actor_id=admin_id
    )
    await db.commit()
    entry = (await db.execute(select(AuditLog))).scalars().first()

    await db.delete(entry)
    with pytest.raises(ImmutabilityViolationError):
        await db.flush()
    await db.rollback()


async def test_unknown_category_rejected(db, rate_settings):
    with pytest.raises(InvalidRateValue):
        await rate_settings_service.update_category(db, "vat", {}, actor_id=uuid4())
