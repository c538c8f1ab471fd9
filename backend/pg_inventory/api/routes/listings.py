"""
Listing edit endpoints: room configuration sync, owner availability edits
and listing-wide reconcile.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.exceptions import InvalidConfiguration
from pg_inventory.db.session import get_db
from pg_inventory.schemas.room_configuration import (
    ConfigurationSyncRequest,
    ConfigurationSyncResponse,
    OwnerAvailabilityRequest,
    RoomConfigurationResponse,
)
from pg_inventory.services.configuration_sync import sync_configurations
from pg_inventory.services.reconciliation_service import reconcile_listing, set_owner_availability

router = APIRouter(prefix="/listings", tags=["Listings"])


@router.put("/{listing_id}/room-configurations", response_model=ConfigurationSyncResponse)
async def sync_room_configurations(
    listing_id: int,
    payload: ConfigurationSyncRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Replace a listing's room configurations with the submitted set.

    Rows that still have bookings are kept and listed under `blocked`.
    """
    result = await sync_configurations(db, listing_id, payload.configurations)
    return ConfigurationSyncResponse.model_validate(result)


@router.put("/{listing_id}/availability", response_model=list[RoomConfigurationResponse])
async def update_owner_availability(
    listing_id: int,
    payload: OwnerAvailabilityRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Set the free beds per room type; total rooms are derived from the
    requested beds plus the beds already booked.
    """
    requested = {item.room_config_id: item.available_beds for item in payload.rooms}
    if len(requested) != len(payload.rooms):
        raise InvalidConfiguration(
            "Each room configuration may appear only once",
            {"listing_id": listing_id},
        )
    return await set_owner_availability(db, listing_id, requested)


@router.post("/{listing_id}/reconcile", response_model=list[RoomConfigurationResponse])
async def reconcile_listing_endpoint(listing_id: int, db: AsyncSession = Depends(get_db)):
    return await reconcile_listing(db, listing_id)
