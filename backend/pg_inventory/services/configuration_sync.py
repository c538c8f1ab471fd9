"""
Listing edit: reconcile the submitted room configurations with the stored set.

The edit form always submits the full set for a listing. Rows are
matched by id:

  - submitted with an id of one of this listing's rows -> update in place
  - submitted without an id, or with an id we do not know -> insert
  - stored but not submitted -> delete, unless any booking references it

A configuration with bookings (of any status, historical ones included)
is never deleted; the removal is skipped and reported as DeleteBlocked
in the result. The whole sync is one transaction per listing.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.exceptions import InvalidConfiguration
from pg_inventory.core.logging import get_logger
from pg_inventory.core.metrics import operation_latency, record_sync_outcome
from pg_inventory.db.session import atomic
from pg_inventory.models.room_configuration import RoomConfiguration
from pg_inventory.schemas.room_configuration import RoomConfigurationSpec
from pg_inventory.services.capacity import normalize_room_type, total_beds
from pg_inventory.services.counters import claim_listing
from pg_inventory.services.occupancy import booking_count
from pg_inventory.services.reconciliation_service import recompute

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeleteBlocked:
    """A removal that was not honoured because bookings still reference the row."""

    room_config_id: int
    booking_count: int


@dataclass
class SyncResult:
    configurations: List[RoomConfiguration] = field(default_factory=list)
    created: List[int] = field(default_factory=list)
    updated: List[int] = field(default_factory=list)
    deleted: List[int] = field(default_factory=list)
    blocked: List[DeleteBlocked] = field(default_factory=list)


def _validate_specs(specs: List[RoomConfigurationSpec]) -> None:
    seen = set()
    for index, spec in enumerate(specs, start=1):
        capacity = total_beds(spec.total_rooms, spec.room_type)

        if spec.manual_override and spec.available_beds is not None and spec.available_beds > capacity:
            raise InvalidConfiguration(
                f"Available beds cannot exceed total beds in configuration #{index} "
                f"(Total: {capacity} beds, Available: {spec.available_beds} beds)",
                {"index": index, "total_beds": capacity, "available_beds": spec.available_beds},
            )

        if spec.id is not None:
            if spec.id in seen:
                raise InvalidConfiguration(
                    f"Room configuration {spec.id} submitted more than once",
                    {"index": index, "room_config_id": spec.id},
                )
            seen.add(spec.id)


async def _update(db: AsyncSession, config: RoomConfiguration, spec: RoomConfigurationSpec) -> None:
    room_type = normalize_room_type(spec.room_type).value
    capacity_changed = config.total_rooms != spec.total_rooms or config.room_type != room_type
    override_released = config.manual_override and not spec.manual_override

    config.room_type = room_type
    config.rent_per_month = spec.rent_per_month
    config.total_rooms = spec.total_rooms
    config.manual_override = spec.manual_override

    if spec.manual_override:
        if spec.available_beds is not None:
            config.available_beds = spec.available_beds
        else:
            # Keep the frozen value, but never above the new capacity
            config.available_beds = min(config.available_beds, config.total_beds)
    await db.flush()

    if not spec.manual_override and (capacity_changed or override_released):
        await recompute(db, config)


async def _insert(db: AsyncSession, listing_id: int, spec: RoomConfigurationSpec) -> RoomConfiguration:
    room_type = normalize_room_type(spec.room_type).value
    capacity = total_beds(spec.total_rooms, room_type)
    seeded = spec.available_beds if spec.available_beds is not None else capacity

    config = RoomConfiguration(
        listing_id=listing_id,
        room_type=room_type,
        rent_per_month=spec.rent_per_month,
        total_rooms=spec.total_rooms,
        available_beds=min(seeded, capacity),
        manual_override=spec.manual_override,
        version=1,
    )
    db.add(config)
    await db.flush()

    # New rows hold no bookings yet, but the seeded value still has to be
    # brought in line with capacity.
    await recompute(db, config)
    return config


async def sync_configurations(
    db: AsyncSession,
    listing_id: int,
    specs: Iterable[RoomConfigurationSpec],
) -> SyncResult:
    """
    Apply a listing's submitted room configurations.

    Raises ListingMissing, InvalidRoomType, InvalidConfiguration or
    TransactionFailed; on any error nothing is written.
    """
    specs = list(specs)
    _validate_specs(specs)
    start_time = time.perf_counter()
    result = SyncResult()

    async with atomic(db, "sync_configurations"):
        persisted: Dict[int, RoomConfiguration] = {
            config.id: config for config in await claim_listing(db, listing_id)
        }

        for spec in specs:
            existing = persisted.pop(spec.id, None) if spec.id is not None else None
            if existing is not None:
                await _update(db, existing, spec)
                result.updated.append(existing.id)
            else:
                created = await _insert(db, listing_id, spec)
                result.created.append(created.id)

        for config_id in sorted(persisted):
            references = await booking_count(db, config_id)
            if references:
                result.blocked.append(DeleteBlocked(config_id, references))
                logger.info(
                    "configuration_delete_blocked",
                    listing_id=listing_id,
                    room_config_id=config_id,
                    booking_count=references,
                )
                continue
            await db.execute(
                delete(RoomConfiguration)
                .where(
                    RoomConfiguration.id == config_id,
                    RoomConfiguration.listing_id == listing_id,
                )
                .execution_options(synchronize_session=False)
            )
            db.expunge(persisted[config_id])
            result.deleted.append(config_id)

    rows = await db.execute(
        select(RoomConfiguration)
        .where(RoomConfiguration.listing_id == listing_id)
        .order_by(RoomConfiguration.rent_per_month, RoomConfiguration.id)
        .execution_options(populate_existing=True)
    )
    result.configurations = list(rows.scalars().all())

    record_sync_outcome("created", len(result.created))
    record_sync_outcome("updated", len(result.updated))
    record_sync_outcome("deleted", len(result.deleted))
    record_sync_outcome("delete_blocked", len(result.blocked))
    operation_latency.labels(operation="sync_configurations").observe(time.perf_counter() - start_time)

    logger.info(
        "configurations_synced",
        listing_id=listing_id,
        created=result.created,
        updated=result.updated,
        deleted=result.deleted,
        blocked=[blocked.room_config_id for blocked in result.blocked],
    )
    return result
