"""
Room configuration inventory endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.api.deps import run_expiry_sweep
from pg_inventory.db.session import get_db
from pg_inventory.schemas.room_configuration import (
    AvailabilityReportResponse,
    ManualOverrideRequest,
    RoomConfigurationResponse,
)
from pg_inventory.services.reconciliation_service import (
    availability_report,
    reconcile_configuration,
    set_manual_override,
)

router = APIRouter(prefix="/room-configurations", tags=["Room Configurations"])


@router.get(
    "/{room_config_id}",
    response_model=AvailabilityReportResponse,
    dependencies=[Depends(run_expiry_sweep)],
)
async def read_availability(room_config_id: int, db: AsyncSession = Depends(get_db)):
    """Stored available beds next to a fresh recompute, with the drift between them."""
    report = await availability_report(db, room_config_id)
    return AvailabilityReportResponse.model_validate(report)


@router.post("/{room_config_id}/reconcile", response_model=RoomConfigurationResponse)
async def reconcile(room_config_id: int, db: AsyncSession = Depends(get_db)):
    return await reconcile_configuration(db, room_config_id)


@router.put("/{room_config_id}/override", response_model=RoomConfigurationResponse)
async def update_manual_override(
    room_config_id: int,
    payload: ManualOverrideRequest,
    db: AsyncSession = Depends(get_db),
):
    """Freeze available beds at an operator-chosen value, or release the freeze."""
    return await set_manual_override(db, room_config_id, payload.enabled, payload.available_beds)
