"""
Shared route dependencies.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.config import get_settings
from pg_inventory.db.session import get_db
from pg_inventory.services.expiry_sweeper import sweep_expired_bookings_quietly


async def run_expiry_sweep(db: AsyncSession = Depends(get_db)) -> None:
    """
    Complete expired bookings before serving a read.

    Failures are logged by the sweeper and never block the request.
    """
    if get_settings().SWEEP_ON_REQUEST:
        await sweep_expired_bookings_quietly(db)
