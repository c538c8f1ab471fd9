"""
Tests for listing edit sync of room configurations.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.exceptions import InvalidConfiguration, InvalidRoomType, ListingMissing, TransactionFailed
from pg_inventory.models import Listing, RoomConfiguration
from pg_inventory.schemas.room_configuration import RoomConfigurationSpec
from pg_inventory.services import configuration_sync
from pg_inventory.services.configuration_sync import DeleteBlocked, sync_configurations


def spec(**fields) -> RoomConfigurationSpec:
    fields.setdefault("room_type", "double sharing")
    fields.setdefault("rent_per_month", Decimal("8000.00"))
    fields.setdefault("total_rooms", 2)
    return RoomConfigurationSpec(**fields)


async def count_configs(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(RoomConfiguration))


@pytest.mark.asyncio
async def test_shrinking_capacity_recomputes(db_session: AsyncSession, listing, make_config, make_booking, fetch_config):
    """2 double rooms with 1 active booking cut to 1 room: 2 beds, 1 taken."""
    config = await make_config(room_type="double sharing", total_rooms=2, available_beds=3)
    await make_booking(config.id, status="confirmed")

    result = await sync_configurations(db_session, listing.id, [spec(id=config.id, total_rooms=1)])

    assert result.updated == [config.id]
    assert (await fetch_config(config.id)).available_beds == 1
    assert result.configurations[0].total_beds == 2


@pytest.mark.asyncio
async def test_empty_submission_keeps_configuration_with_history(
    db_session: AsyncSession, listing, make_config, make_booking, fetch_config
):
    config = await make_config(total_rooms=2, available_beds=4)
    await make_booking(config.id, status="completed")

    result = await sync_configurations(db_session, listing.id, [])

    assert result.blocked == [DeleteBlocked(room_config_id=config.id, booking_count=1)]
    assert result.deleted == []
    stored = await fetch_config(config.id)
    assert stored is not None
    assert stored.total_rooms == 2
    assert stored.available_beds == 4


@pytest.mark.asyncio
async def test_unreferenced_configuration_is_deleted(db_session: AsyncSession, listing, make_config, fetch_config):
    kept = await make_config(room_type="single sharing", total_rooms=4)
    dropped = await make_config(room_type="triple sharing", total_rooms=1)

    result = await sync_configurations(db_session, listing.id, [spec(id=kept.id, room_type="single sharing", total_rooms=4)])

    assert result.deleted == [dropped.id]
    assert await fetch_config(dropped.id) is None
    assert [config.id for config in result.configurations] == [kept.id]


@pytest.mark.asyncio
async def test_new_configuration_starts_at_capacity(db_session: AsyncSession, listing):
    result = await sync_configurations(db_session, listing.id, [spec(room_type="Triple", total_rooms=3)])

    assert len(result.created) == 1
    created = result.configurations[0]
    assert created.room_type == "triple sharing"
    assert created.total_beds == 9
    assert created.available_beds == 9
    assert created.manual_override is False


@pytest.mark.asyncio
async def test_new_configuration_ignores_seed_without_override(db_session: AsyncSession, listing):
    result = await sync_configurations(db_session, listing.id, [spec(total_rooms=1, available_beds=1)])
    assert result.configurations[0].available_beds == 2


@pytest.mark.asyncio
async def test_new_configuration_with_override_keeps_submitted_value(db_session: AsyncSession, listing):
    result = await sync_configurations(
        db_session,
        listing.id,
        [spec(total_rooms=2, available_beds=1, manual_override=True)],
    )
    created = result.configurations[0]
    assert created.manual_override is True
    assert created.available_beds == 1


@pytest.mark.asyncio
async def test_rent_only_edit_keeps_counter(db_session: AsyncSession, listing, make_config, fetch_config):
    config = await make_config(total_rooms=2, available_beds=3)

    await sync_configurations(db_session, listing.id, [spec(id=config.id, rent_per_month=Decimal("9500.00"))])

    stored = await fetch_config(config.id)
    assert stored.rent_per_month == Decimal("9500.00")
    assert stored.available_beds == 3


@pytest.mark.asyncio
async def test_room_type_change_recomputes(db_session: AsyncSession, listing, make_config, make_booking, fetch_config):
    config = await make_config(room_type="double sharing", total_rooms=2)
    await make_booking(config.id, status="confirmed")

    await sync_configurations(db_session, listing.id, [spec(id=config.id, room_type="4 sharing", total_rooms=2)])

    stored = await fetch_config(config.id)
    assert stored.room_type == "4 sharing"
    assert stored.available_beds == 7


@pytest.mark.asyncio
async def test_releasing_override_through_sync_recomputes(db_session: AsyncSession, listing, make_config, make_booking, fetch_config):
    config = await make_config(total_rooms=2, available_beds=0, manual_override=True)
    await make_booking(config.id, status="confirmed")

    await sync_configurations(db_session, listing.id, [spec(id=config.id, manual_override=False)])

    stored = await fetch_config(config.id)
    assert stored.manual_override is False
    assert stored.available_beds == 3


@pytest.mark.asyncio
async def test_override_frozen_value_clamped_to_new_capacity(db_session: AsyncSession, listing, make_config, fetch_config):
    config = await make_config(total_rooms=3, available_beds=5, manual_override=True)

    await sync_configurations(db_session, listing.id, [spec(id=config.id, total_rooms=1, manual_override=True)])

    assert (await fetch_config(config.id)).available_beds == 2


@pytest.mark.asyncio
async def test_unknown_id_is_inserted(db_session: AsyncSession, listing, make_config):
    config = await make_config()

    result = await sync_configurations(
        db_session,
        listing.id,
        [spec(id=config.id), spec(id=98765, room_type="single sharing", total_rooms=1)],
    )

    assert result.updated == [config.id]
    assert len(result.created) == 1
    assert result.created[0] != 98765


@pytest.mark.asyncio
async def test_override_value_above_capacity_rejected(db_session: AsyncSession, listing, session_factory):
    with pytest.raises(InvalidConfiguration) as exc_info:
        await sync_configurations(
            db_session,
            listing.id,
            [spec(total_rooms=1, available_beds=3, manual_override=True)],
        )

    assert "configuration #1" in exc_info.value.message
    assert await count_configs(session_factory) == 0


@pytest.mark.asyncio
async def test_duplicate_ids_rejected(db_session: AsyncSession, listing, make_config):
    config = await make_config()
    with pytest.raises(InvalidConfiguration):
        await sync_configurations(db_session, listing.id, [spec(id=config.id), spec(id=config.id)])


@pytest.mark.asyncio
async def test_invalid_room_type_writes_nothing(db_session: AsyncSession, listing, make_config, fetch_config, session_factory):
    config = await make_config(total_rooms=2)

    with pytest.raises(InvalidRoomType):
        await sync_configurations(
            db_session,
            listing.id,
            [spec(id=config.id, total_rooms=5), spec(room_type="penthouse")],
        )

    assert (await fetch_config(config.id)).total_rooms == 2
    assert await count_configs(session_factory) == 1


@pytest.mark.asyncio
async def test_missing_listing(db_session: AsyncSession):
    with pytest.raises(ListingMissing):
        await sync_configurations(db_session, 5555, [spec()])


@pytest.mark.asyncio
async def test_configurations_of_other_listings_are_untouched(
    db_session: AsyncSession, listing, session_factory, make_config, fetch_config
):
    async with session_factory() as session:
        other = Listing(title="Other PG", version=1)
        session.add(other)
        await session.commit()
        await session.refresh(other)

    foreign = await make_config(listing_id=other.id)

    result = await sync_configurations(db_session, listing.id, [spec(id=foreign.id)])

    assert result.created and result.created[0] != foreign.id
    stored = await fetch_config(foreign.id)
    assert stored.listing_id == other.id


@pytest.mark.asyncio
async def test_store_failure_mid_sync_writes_nothing(
    db_session: AsyncSession, listing, make_config, fetch_config, session_factory, monkeypatch
):
    kept = await make_config(total_rooms=2)
    dropped = await make_config(room_type="single sharing", total_rooms=1)

    async def failing_booking_count(db, room_config_id):
        raise OperationalError("SELECT count(*) FROM bookings", {}, Exception("database is locked"))

    monkeypatch.setattr(configuration_sync, "booking_count", failing_booking_count)

    # The update and the insert are flushed before the deletion guard runs
    with pytest.raises(TransactionFailed) as exc_info:
        await sync_configurations(
            db_session,
            listing.id,
            [spec(id=kept.id, total_rooms=5), spec(room_type="triple sharing", total_rooms=1)],
        )

    assert exc_info.value.details["operation"] == "sync_configurations"
    stored = await fetch_config(kept.id)
    assert stored.total_rooms == 2
    assert stored.available_beds == 4
    assert stored.version == 1
    assert await fetch_config(dropped.id) is not None
    assert await count_configs(session_factory) == 2
