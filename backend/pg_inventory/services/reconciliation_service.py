"""
Full-recompute reconciliation of available beds.

The delta path (booking_service) is cheap and handles single status
changes. This module is the authoritative recovery path: it derives
available beds from first principles,

    available_beds = max(0, total_beds - occupied_beds)

and overwrites the stored counter. It runs whenever capacity changes,
when a configuration is created, when manual override is switched off,
and on demand to repair drift. Configurations under manual override are
never touched here.
"""

import math
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.exceptions import ConfigurationMissing, InvalidConfiguration, InventoryError
from pg_inventory.core.logging import get_logger
from pg_inventory.core.metrics import record_reconciliation, record_sync_outcome
from pg_inventory.db.session import atomic
from pg_inventory.models.room_configuration import RoomConfiguration
from pg_inventory.services.availability import available_beds, resolve_available_beds
from pg_inventory.services.counters import claim_configuration, claim_listing, load_configuration
from pg_inventory.services.occupancy import occupied_beds

logger = get_logger(__name__)


@dataclass
class AvailabilityReport:
    room_config_id: int
    room_type: str
    total_rooms: int
    total_beds: int
    occupied_beds: int
    stored_available_beds: int
    computed_available_beds: int
    manual_override: bool

    @property
    def drift(self) -> int:
        return self.stored_available_beds - self.computed_available_beds


@dataclass
class ReconcileSummary:
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    failed_ids: List[int] = field(default_factory=list)


async def recompute(db: AsyncSession, config: RoomConfiguration) -> RoomConfiguration:
    """
    Recompute and persist available beds for a configuration already
    claimed by the current transaction. No-op under manual override.
    """
    if config.manual_override:
        record_reconciliation("skipped_override")
        logger.debug("reconcile_skipped_manual_override", room_config_id=config.id)
        return config

    occupied = await occupied_beds(db, config.id)
    available = available_beds(config.total_rooms, config.room_type, occupied)
    drift = config.available_beds - available if config.available_beds is not None else 0

    config.available_beds = available
    await db.flush()

    record_reconciliation("updated" if drift else "unchanged", drift)
    if drift:
        logger.info(
            "availability_drift_corrected",
            room_config_id=config.id,
            occupied_beds=occupied,
            available_beds=available,
            drift=drift,
        )
    return config


async def reconcile_configuration(db: AsyncSession, room_config_id: int) -> RoomConfiguration:
    """Full recompute of one configuration. Raises ConfigurationMissing."""
    async with atomic(db, "reconcile_configuration"):
        config = await claim_configuration(db, room_config_id)
        await recompute(db, config)

    await db.refresh(config)
    logger.info(
        "configuration_reconciled",
        room_config_id=config.id,
        available_beds=config.available_beds,
        manual_override=config.manual_override,
    )
    return config


async def reconcile_listing(db: AsyncSession, listing_id: int) -> List[RoomConfiguration]:
    """Recompute every configuration of a listing in one transaction."""
    async with atomic(db, "reconcile_listing"):
        configs = await claim_listing(db, listing_id)
        for config in configs:
            await recompute(db, config)

    for config in configs:
        await db.refresh(config)
    logger.info("listing_reconciled", listing_id=listing_id, configurations=len(configs))
    return configs


async def reconcile_all(db: AsyncSession) -> ReconcileSummary:
    """
    Store-wide repair pass. Each configuration is reconciled in its own
    transaction so one bad row does not block the rest.
    """
    result = await db.execute(select(RoomConfiguration.id).order_by(RoomConfiguration.id))
    config_ids = list(result.scalars().all())
    summary = ReconcileSummary()

    for config_id in config_ids:
        summary.processed += 1
        try:
            async with atomic(db, "reconcile_configuration"):
                config = await claim_configuration(db, config_id)
                before = config.available_beds
                await recompute(db, config)
        except InventoryError as e:
            summary.failed += 1
            summary.failed_ids.append(config_id)
            logger.warning("reconcile_failed", room_config_id=config_id, error=str(e))
            continue

        if config.manual_override:
            summary.skipped += 1
        elif config.available_beds != before:
            summary.updated += 1

    logger.info(
        "reconcile_all_completed",
        processed=summary.processed,
        updated=summary.updated,
        skipped=summary.skipped,
        failed=summary.failed,
    )
    return summary


async def set_manual_override(
    db: AsyncSession,
    room_config_id: int,
    enabled: bool,
    explicit_available_beds: Optional[int] = None,
) -> RoomConfiguration:
    """
    Freeze or unfreeze a configuration's available beds.

    Enabling keeps the current value, or sets `explicit_available_beds`
    which must lie within [0, total_beds]. Disabling recomputes at once.
    """
    if not enabled and explicit_available_beds is not None:
        raise InvalidConfiguration(
            "Available beds can only be set while manual override is enabled",
            {"room_config_id": room_config_id},
        )

    async with atomic(db, "set_manual_override"):
        config = await claim_configuration(db, room_config_id)

        if enabled:
            if explicit_available_beds is not None:
                _check_override_value(config, explicit_available_beds)
                occupied = await occupied_beds(db, config.id)
                if explicit_available_beds > config.total_beds - occupied:
                    logger.warning(
                        "manual_override_exceeds_free_beds",
                        room_config_id=config.id,
                        requested=explicit_available_beds,
                        occupied_beds=occupied,
                        total_beds=config.total_beds,
                    )
                config.available_beds = explicit_available_beds
            config.manual_override = True
            await db.flush()
        else:
            config.manual_override = False
            await db.flush()
            await recompute(db, config)

    await db.refresh(config)
    logger.info(
        "manual_override_set",
        room_config_id=config.id,
        enabled=config.manual_override,
        available_beds=config.available_beds,
    )
    return config


def _check_override_value(config: RoomConfiguration, value: int) -> None:
    if value < 0 or value > config.total_beds:
        raise InvalidConfiguration(
            f"Available beds must be between 0 and {config.total_beds}",
            {
                "room_config_id": config.id,
                "available_beds": value,
                "total_beds": config.total_beds,
            },
        )


async def set_owner_availability(
    db: AsyncSession,
    listing_id: int,
    requested: Mapping[int, int],
) -> List[RoomConfiguration]:
    """
    Owner-side availability edit: the owner states how many beds are free
    and the room count follows from it,

        total_rooms = ceil((requested + occupied) / beds_per_room)

    `requested` maps room configuration ids of the listing to the desired
    available beds; configurations not in the mapping are left alone.
    Outside manual override the stored counter is recomputed from the new
    room count, so it may come out above the request when the last room
    is only partly used. Under override the requested value is stored as is.

    All rows change in one transaction; on any error nothing is written.
    """
    for room_config_id, requested_beds in requested.items():
        if requested_beds < 0:
            raise InvalidConfiguration(
                f"Room configuration {room_config_id} cannot have negative available beds",
                {"room_config_id": room_config_id, "available_beds": requested_beds},
            )

    changed: List[int] = []
    async with atomic(db, "set_owner_availability"):
        configs = {config.id: config for config in await claim_listing(db, listing_id)}

        for room_config_id, requested_beds in sorted(requested.items()):
            config = configs.get(room_config_id)
            if config is None:
                raise ConfigurationMissing(room_config_id)
            if requested_beds == config.available_beds:
                continue

            booked = await occupied_beds(db, config.id)
            wanted_beds = requested_beds + booked
            rooms = math.ceil(wanted_beds / config.beds_per_room)
            if rooms < 1:
                raise InvalidConfiguration(
                    f"Room type '{config.room_type}' needs at least one room; "
                    "use manual override to close it",
                    {"room_config_id": config.id, "available_beds": requested_beds},
                )
            if rooms * config.beds_per_room < booked:
                raise InvalidConfiguration(
                    f"Room type '{config.room_type}' cannot have fewer beds than booked "
                    f"({booked} beds booked)",
                    {"room_config_id": config.id, "occupied_beds": booked},
                )

            config.total_rooms = rooms
            if config.manual_override:
                config.available_beds = requested_beds
            else:
                config.available_beds = available_beds(rooms, config.room_type, booked)
            await db.flush()
            changed.append(config.id)

    for config in configs.values():
        await db.refresh(config)

    record_sync_outcome("owner_updated", len(changed))
    logger.info("owner_availability_updated", listing_id=listing_id, updated=changed)
    return [configs[config_id] for config_id in sorted(configs)]


async def availability_report(db: AsyncSession, room_config_id: int) -> AvailabilityReport:
    """
    Read-only comparison of the stored counter with what a full recompute
    would persist. Under manual override the two always match.
    """
    config = await load_configuration(db, room_config_id)
    occupied = await occupied_beds(db, config.id)
    return AvailabilityReport(
        room_config_id=config.id,
        room_type=config.room_type,
        total_rooms=config.total_rooms,
        total_beds=config.total_beds,
        occupied_beds=occupied,
        stored_available_beds=config.available_beds,
        computed_available_beds=resolve_available_beds(
            config.total_rooms,
            config.room_type,
            occupied,
            config.manual_override,
            config.available_beds,
        ),
        manual_override=config.manual_override,
    )
