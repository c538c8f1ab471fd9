"""
Maintenance endpoints for cron jobs and the admin "run now" buttons.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.db.session import get_db
from pg_inventory.schemas.room_configuration import ReconcileAllResponse
from pg_inventory.schemas.sweep import SweepSummaryResponse
from pg_inventory.services.expiry_sweeper import sweep_expired_bookings
from pg_inventory.services.reconciliation_service import reconcile_all

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.post("/sweep-expired", response_model=SweepSummaryResponse)
async def sweep_expired(as_of: Optional[date] = None, db: AsyncSession = Depends(get_db)):
    """Complete confirmed bookings whose rental period ended on or before `as_of` (default today)."""
    summary = await sweep_expired_bookings(db, as_of)
    return SweepSummaryResponse.model_validate(summary)


@router.post("/reconcile-all", response_model=ReconcileAllResponse)
async def reconcile_everything(db: AsyncSession = Depends(get_db)):
    """Recompute available beds for every room configuration not under manual override."""
    summary = await reconcile_all(db)
    return ReconcileAllResponse.model_validate(summary)
