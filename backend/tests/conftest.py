"""
Pytest fixtures for test database, client, and inventory rows.

Every test gets its own SQLite database file, so concurrent sessions in a
test really contend on the same rows and nothing leaks between tests.
"""

import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

# Must be set before pg_inventory builds its module-level engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SWEEP_ON_REQUEST", "true")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pg_inventory.main import app
from pg_inventory.db.base import Base
from pg_inventory.db.session import build_engine, get_db
from pg_inventory.models import Booking, Listing, RoomConfiguration


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create tables in a fresh database file, dispose after the test."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}", echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with a per-request test session."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def listing(session_factory) -> Listing:
    async with session_factory() as session:
        row = Listing(title="Sunrise PG", version=1)
        session.add(row)
        await session.commit()
        await session.refresh(row)
        return row


@pytest.fixture
def make_config(session_factory, listing):
    """Insert a room configuration with an explicit stored counter."""

    async def _make(
        room_type: str = "double sharing",
        total_rooms: int = 2,
        available_beds: int = None,
        manual_override: bool = False,
        rent_per_month: str = "8000.00",
        listing_id: int = None,
    ) -> RoomConfiguration:
        async with session_factory() as session:
            config = RoomConfiguration(
                listing_id=listing_id or listing.id,
                room_type=room_type,
                rent_per_month=Decimal(rent_per_month),
                total_rooms=total_rooms,
                available_beds=0,
                manual_override=manual_override,
                version=1,
            )
            config.available_beds = (
                available_beds if available_beds is not None else config.total_beds
            )
            session.add(config)
            await session.commit()
            await session.refresh(config)
            return config

    return _make


@pytest.fixture
def make_booking(session_factory):
    """Insert a booking row directly, without touching inventory."""

    async def _make(
        room_config_id: int,
        status: str = "pending",
        start_date: date = date(2030, 1, 1),
        duration_months: int = 1,
    ) -> Booking:
        async with session_factory() as session:
            booking = Booking(
                room_config_id=room_config_id,
                status=status,
                start_date=start_date,
                duration_months=duration_months,
                amount=Decimal("8000.00"),
            )
            session.add(booking)
            await session.commit()
            await session.refresh(booking)
            return booking

    return _make


@pytest.fixture
def fetch_config(session_factory):
    """Read a configuration's committed state through a separate session."""

    async def _fetch(room_config_id: int) -> RoomConfiguration:
        async with session_factory() as session:
            return await session.get(RoomConfiguration, room_config_id)

    return _fetch


@pytest.fixture
def fetch_booking(session_factory):
    async def _fetch(booking_id: int) -> Booking:
        async with session_factory() as session:
            return await session.get(Booking, booking_id)

    return _fetch
