"""
Storage-level operations on the room configuration counters.

CONCURRENCY STRATEGY: Row claim + conditional UPDATE
====================================================

Problem:
  Two admins confirm two different pending bookings on the same room
  configuration while a single bed is left. Both read available_beds=1,
  both decrement, both succeed. Result: overbooking.

Solution:
  1. Every writer first *claims* the configuration row:
       UPDATE room_configurations SET version = version + 1 WHERE id = :id
     The UPDATE takes the row write lock (PostgreSQL row lock, SQLite
     reserved lock), so writers on the same configuration queue up behind
     each other until the first one commits. rowcount == 0 means the
     configuration does not exist.
  2. Deltas are conditional arithmetic inside the UPDATE, never
     read-modify-write in Python:
       claim a bed:   SET available = available - 1 WHERE available > 0
       release a bed: SET available = min(total_beds - confirmed_others,
                                          available + 1)
     A claim that matches no row means no bed was left. A release is
     capped by the beds still held by *other* confirmed bookings, counted
     in the same statement, so a booking that never took a bed (pending)
     cannot hand one back.
  3. The CHECK constraint (available_rooms >= 0) is the final safety net.

Rows under manual override are excluded by the WHERE clause, so a delta
can never move an operator-frozen value.
"""

from typing import List

from sqlalchemy import case, false, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.exceptions import ConfigurationMissing, ListingMissing
from pg_inventory.core.logging import get_logger
from pg_inventory.core.metrics import record_adjustment
from pg_inventory.models.booking import Booking
from pg_inventory.models.listing import Listing
from pg_inventory.models.room_configuration import RoomConfiguration
from pg_inventory.services.lifecycle import BookingStatus

logger = get_logger(__name__)


async def claim_configuration(db: AsyncSession, room_config_id: int) -> RoomConfiguration:
    """Lock one configuration row for this transaction and return its fresh state."""
    result = await db.execute(
        update(RoomConfiguration)
        .where(RoomConfiguration.id == room_config_id)
        .values({RoomConfiguration.version: RoomConfiguration.version + 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ConfigurationMissing(room_config_id)
    return await load_configuration(db, room_config_id)


async def claim_listing(db: AsyncSession, listing_id: int) -> List[RoomConfiguration]:
    """Lock a listing and all of its configuration rows; returns the configurations."""
    result = await db.execute(
        update(Listing)
        .where(Listing.id == listing_id)
        .values({Listing.version: Listing.version + 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise ListingMissing(listing_id)

    await db.execute(
        update(RoomConfiguration)
        .where(RoomConfiguration.listing_id == listing_id)
        .values({RoomConfiguration.version: RoomConfiguration.version + 1})
        .execution_options(synchronize_session=False)
    )
    rows = await db.execute(
        select(RoomConfiguration)
        .where(RoomConfiguration.listing_id == listing_id)
        .order_by(RoomConfiguration.id)
        .execution_options(populate_existing=True)
    )
    return list(rows.scalars().all())


async def load_configuration(db: AsyncSession, room_config_id: int) -> RoomConfiguration:
    result = await db.execute(
        select(RoomConfiguration)
        .where(RoomConfiguration.id == room_config_id)
        .execution_options(populate_existing=True)
    )
    config = result.scalar_one_or_none()
    if config is None:
        raise ConfigurationMissing(room_config_id)
    return config


async def take_bed(db: AsyncSession, room_config_id: int) -> bool:
    """Decrement available beds if one is left. False means the configuration is full."""
    result = await db.execute(
        update(RoomConfiguration)
        .where(
            RoomConfiguration.id == room_config_id,
            RoomConfiguration.manual_override == false(),
            RoomConfiguration.available_beds > 0,
        )
        .values({RoomConfiguration.available_beds: RoomConfiguration.available_beds - 1})
        .execution_options(synchronize_session=False)
    )
    taken = result.rowcount == 1
    if taken:
        record_adjustment("claim")
    return taken


async def return_bed(db: AsyncSession, room_config_id: int, booking_id: int) -> bool:
    """
    Give back the bed of `booking_id`. The counter never rises above the
    beds left free by the configuration's other confirmed bookings.
    """
    confirmed_others = (
        select(func.count())
        .select_from(Booking)
        .where(
            Booking.room_config_id == room_config_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.id != booking_id,
        )
        .scalar_subquery()
    )
    ceiling = RoomConfiguration.total_beds - confirmed_others
    incremented = RoomConfiguration.available_beds + 1
    result = await db.execute(
        update(RoomConfiguration)
        .where(
            RoomConfiguration.id == room_config_id,
            RoomConfiguration.manual_override == false(),
        )
        .values({
            RoomConfiguration.available_beds: case(
                (ceiling <= 0, 0),
                (incremented > ceiling, ceiling),
                else_=incremented,
            )
        })
        .execution_options(synchronize_session=False)
    )
    returned = result.rowcount == 1
    if returned:
        record_adjustment("release")
    return returned
