"""
Tests for the expiry sweep of finished rentals.
"""

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.services.expiry_sweeper import (
    find_expired_bookings,
    sweep_expired_bookings,
    sweep_expired_bookings_quietly,
)


@pytest.mark.asyncio
async def test_expired_booking_is_completed(db_session: AsyncSession, make_config, make_booking, fetch_booking, fetch_config):
    """Jan 2024 rental evaluated on Feb 1st: completed, bed back."""
    config = await make_config(room_type="double sharing", total_rooms=2, available_beds=3)
    booking = await make_booking(config.id, status="confirmed", start_date=date(2024, 1, 1), duration_months=1)

    summary = await sweep_expired_bookings(db_session, as_of=date(2024, 2, 1))

    assert summary.transitioned_ids == [booking.id]
    assert summary.skipped == 0
    assert (await fetch_booking(booking.id)).status == "completed"
    assert (await fetch_config(config.id)).available_beds == 4


@pytest.mark.asyncio
async def test_last_rental_day_counts_as_expired(db_session: AsyncSession, make_config, make_booking):
    config = await make_config(total_rooms=2, available_beds=3)
    booking = await make_booking(config.id, status="confirmed", start_date=date(2024, 1, 1), duration_months=1)

    assert await find_expired_bookings(db_session, date(2024, 1, 30)) == []
    assert await find_expired_bookings(db_session, date(2024, 1, 31)) == [booking.id]


@pytest.mark.asyncio
async def test_missing_duration_is_one_month(db_session: AsyncSession, make_config, make_booking):
    config = await make_config(total_rooms=2, available_beds=3)
    booking = await make_booking(config.id, status="confirmed", start_date=date(2024, 3, 10), duration_months=None)

    assert await find_expired_bookings(db_session, date(2024, 4, 8)) == []
    assert await find_expired_bookings(db_session, date(2024, 4, 9)) == [booking.id]


@pytest.mark.asyncio
async def test_only_confirmed_bookings_are_swept(db_session: AsyncSession, make_config, make_booking, fetch_booking):
    config = await make_config(total_rooms=2)
    pending = await make_booking(config.id, status="pending", start_date=date(2024, 1, 1))
    cancelled = await make_booking(config.id, status="cancelled", start_date=date(2024, 1, 1))
    running = await make_booking(config.id, status="confirmed", start_date=date(2024, 1, 20), duration_months=2)

    summary = await sweep_expired_bookings(db_session, as_of=date(2024, 2, 1))

    assert summary.transitioned == 0
    assert (await fetch_booking(pending.id)).status == "pending"
    assert (await fetch_booking(cancelled.id)).status == "cancelled"
    assert (await fetch_booking(running.id)).status == "confirmed"


@pytest.mark.asyncio
async def test_second_sweep_is_a_no_op(db_session: AsyncSession, make_config, make_booking, fetch_config):
    config = await make_config(total_rooms=2, available_beds=2)
    await make_booking(config.id, status="confirmed", start_date=date(2024, 1, 1))
    await make_booking(config.id, status="confirmed", start_date=date(2023, 11, 5), duration_months=2)

    first = await sweep_expired_bookings(db_session, as_of=date(2024, 6, 1))
    second = await sweep_expired_bookings(db_session, as_of=date(2024, 6, 1))

    assert first.transitioned == 2
    assert second.transitioned == 0
    assert second.skipped == 0
    assert (await fetch_config(config.id)).available_beds == 4


@pytest.mark.asyncio
async def test_orphaned_booking_is_skipped(db_session: AsyncSession, make_config, make_booking, fetch_booking):
    config = await make_config(total_rooms=2, available_beds=3)
    orphan = await make_booking(424242, status="confirmed", start_date=date(2024, 1, 1))
    expired = await make_booking(config.id, status="confirmed", start_date=date(2024, 1, 2))

    summary = await sweep_expired_bookings(db_session, as_of=date(2024, 3, 1))

    assert summary.skipped_ids == [orphan.id]
    assert summary.transitioned_ids == [expired.id]
    assert (await fetch_booking(orphan.id)).status == "confirmed"


@pytest.mark.asyncio
async def test_sweep_release_respects_override(db_session: AsyncSession, make_config, make_booking, fetch_config):
    config = await make_config(total_rooms=2, available_beds=0, manual_override=True)
    await make_booking(config.id, status="confirmed", start_date=date(2024, 1, 1))

    summary = await sweep_expired_bookings(db_session, as_of=date(2024, 2, 1))

    assert summary.transitioned == 1
    assert (await fetch_config(config.id)).available_beds == 0


@pytest.mark.asyncio
async def test_quiet_sweep_returns_summary(db_session: AsyncSession, make_config, make_booking):
    config = await make_config(total_rooms=2, available_beds=3)
    booking = await make_booking(config.id, status="confirmed", start_date=date(2024, 1, 1))

    summary = await sweep_expired_bookings_quietly(db_session, as_of=date(2024, 2, 1))

    assert summary is not None
    assert summary.transitioned_ids == [booking.id]
