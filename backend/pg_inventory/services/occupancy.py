"""
Occupancy counter: how many beds of a room configuration are taken.

This count, read from the bookings table, is the single source of truth
for occupancy. The denormalized `available_beds` counter is only ever
checked against it, never the other way round.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.models.booking import Booking
from pg_inventory.services.lifecycle import ACTIVE_STATUSES

_ACTIVE_STATUS_VALUES = sorted(status.value for status in ACTIVE_STATUSES)


async def occupied_beds(db: AsyncSession, room_config_id: int) -> int:
    """Beds held by pending or confirmed bookings (one bed per booking)."""
    result = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(
            Booking.room_config_id == room_config_id,
            Booking.status.in_(_ACTIVE_STATUS_VALUES),
        )
    )
    return int(result.scalar_one())


async def booking_count(db: AsyncSession, room_config_id: int) -> int:
    """Bookings of any status referencing the configuration, for the deletion guard."""
    result = await db.execute(
        select(func.count()).select_from(Booking).where(Booking.room_config_id == room_config_id)
    )
    return int(result.scalar_one())
