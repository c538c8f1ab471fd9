"""
Booking status transitions with inventory side effects.

A transition is one transaction:

  1. read the booking to find its room configuration
  2. claim the configuration row (serializes writers on that configuration)
  3. re-read the booking under the claim, so a concurrent writer's change
     is visible before we validate
  4. look up the inventory effect in the lifecycle table (raises on
     transitions outside the table)
  5. apply the delta at the storage level unless the configuration is
     under manual override; a claim that finds no free bed aborts the
     whole transition with CapacityExhausted
  6. persist the new status

Any failure rolls back every step, including the claim.
"""

import time
from typing import Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.exceptions import BookingMissing, CapacityExhausted, InvalidTransition
from pg_inventory.core.logging import get_logger
from pg_inventory.core.metrics import operation_latency, record_adjustment, record_transition
from pg_inventory.db.session import atomic
from pg_inventory.models.booking import Booking
from pg_inventory.models.room_configuration import RoomConfiguration
from pg_inventory.services.counters import claim_configuration, return_bed, take_bed
from pg_inventory.services.lifecycle import (
    BookingStatus,
    InventoryEffect,
    deletion_effect,
    inventory_effect,
    parse_status,
)

logger = get_logger(__name__)


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingMissing(booking_id)
    return booking


async def _apply_effect(
    db: AsyncSession,
    config: RoomConfiguration,
    effect: InventoryEffect,
    booking: Booking,
    target: str,
) -> None:
    if effect is InventoryEffect.NONE:
        return
    if config.manual_override:
        record_adjustment("frozen")
        logger.info(
            "inventory_delta_skipped_manual_override",
            booking_id=booking.id,
            room_config_id=config.id,
            available_beds=config.available_beds,
        )
        return

    if effect is InventoryEffect.CLAIM:
        if not await take_bed(db, config.id):
            logger.warning(
                "booking_capacity_exhausted",
                booking_id=booking.id,
                room_config_id=config.id,
                total_beds=config.total_beds,
            )
            raise CapacityExhausted(booking.status, target, config.id)
    else:
        await return_bed(db, config.id, booking.id)


async def transition_booking(
    db: AsyncSession,
    booking_id: int,
    new_status: Union[str, BookingStatus],
) -> Booking:
    """
    Move a booking to `new_status` and adjust its room configuration's
    available beds by the delta in the lifecycle table.

    Raises InvalidTransition (or CapacityExhausted), BookingMissing,
    ConfigurationMissing or TransactionFailed; nothing is persisted then.
    """
    target = parse_status(new_status)
    start_time = time.perf_counter()
    previous = None

    try:
        async with atomic(db, "transition_booking"):
            booking = await get_booking(db, booking_id)
            config = await claim_configuration(db, booking.room_config_id)
            booking = await get_booking(db, booking_id)
            previous = booking.status

            effect = inventory_effect(previous, target)
            await _apply_effect(db, config, effect, booking, target.value)

            booking.status = target.value
            await db.flush()
    except CapacityExhausted:
        record_transition(previous or "unknown", target.value, "capacity_exhausted")
        raise
    except InvalidTransition:
        record_transition(previous or "unknown", target.value, "rejected")
        raise

    await db.refresh(booking)
    record_transition(previous, target.value, "applied")
    operation_latency.labels(operation="transition_booking").observe(time.perf_counter() - start_time)

    logger.info(
        "booking_transitioned",
        booking_id=booking.id,
        room_config_id=booking.room_config_id,
        from_status=previous,
        to_status=booking.status,
        effect=effect.name.lower(),
        manual_override=config.manual_override,
    )
    return booking


async def delete_booking(db: AsyncSession, booking_id: int) -> Booking:
    """
    Delete a booking. A booking that was still pending or confirmed gives
    its bed back first, so no phantom reservation is left behind.
    Returns the deleted row as a detached snapshot.
    """
    async with atomic(db, "delete_booking"):
        booking = await get_booking(db, booking_id)
        config = await claim_configuration(db, booking.room_config_id)
        booking = await get_booking(db, booking_id)

        effect = deletion_effect(booking.status)
        await _apply_effect(db, config, effect, booking, "deleted")

        await db.execute(
            delete(Booking)
            .where(Booking.id == booking_id)
            .execution_options(synchronize_session=False)
        )
        db.expunge(booking)

    logger.info(
        "booking_deleted",
        booking_id=booking_id,
        room_config_id=booking.room_config_id,
        status=booking.status,
        released=effect is InventoryEffect.RELEASE and not config.manual_override,
    )
    return booking
