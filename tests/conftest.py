"""Shared fixtures: in-memory SQLite database, seeded settings, API client."""

import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.encryption import encrypt_account_number
from app.core.immutability import register_immutability_enforcement
from app.core.middleware import payout_generation_limiter, report_export_limiter
from app.core.security import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.booking import Booking
from app.models.host import HostPayoutProfile
from app.services.rate_settings_service import rate_settings_service
from app.utils.booking_number import generate_booking_reference

register_immutability_enforcement()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; take it over
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def rate_settings(db):
    current = await rate_settings_service.ensure_default_settings(db)
    await db.commit()
    return current


@pytest.fixture
def admin_id() -> UUID:
    return uuid4()


@pytest.fixture
def host_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_booking(db, host_id):
    """Factory for bookings; defaults to a completed, paid 10000 INR stay."""

    async def _make(**overrides) -> Booking:
        values = {
            "host_id": host_id,
            "guest_id": uuid4(),
            "stay_id": uuid4(),
            "check_in": datetime(2026, 9, 1).date(),
            "check_out": datetime(2026, 9, 4).date(),
            "guests": 2,
            "base_amount": Decimal("10000.00"),
            "cleaning_fee": Decimal("0.00"),
            "extra_guest_charge": Decimal("0.00"),
            "total_amount": Decimal("10000.00"),
            "booking_status": "completed",
            "payment_status": "paid",
            "created_at": datetime(2026, 9, 5, 10, 0, tzinfo=UTC),
        }
        values.update(overrides)
        if "booking_reference" not in values:
            values["booking_reference"] = await generate_booking_reference(db)
        booking = Booking(**values)
        db.add(booking)
        await db.commit()
        return booking

    return _make


@pytest.fixture
def make_payout_profile(db, host_id):
    """Factory for host payout destinations; defaults to a complete bank account."""

    async def _make(**overrides) -> HostPayoutProfile:
        account_number = overrides.pop("account_number", "123456789012")
        values = {
            "host_id": host_id,
            "payout_method": "bank_transfer",
            "account_holder_name": "Asha Menon",
            "bank_name": "HDFC Bank",
            "ifsc_code": "HDFC0001234",
            "account_number_encrypted": encrypt_account_number(account_number)
            if account_number
            else None,
        }
        values.update(overrides)
        profile = HostPayoutProfile(**values)
        db.add(profile)
        await db.commit()
        return profile

    return _make


def bearer(actor_id: UUID, role: str = "admin") -> dict[str, str]:
    token = create_access_token({"sub": str(actor_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def no_rate_limit():
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[payout_generation_limiter] = no_rate_limit
    app.dependency_overrides[report_export_limiter] = no_rate_limit

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
