"""
Auto-complete bookings whose rental period is over.

The sweep is not scheduled; it runs opportunistically at the start of
read requests and may be invoked many times per minute from concurrent
requests. It stays safe because:

  - the selection only matches `confirmed` bookings, so a completed row
    never matches again (idempotent)
  - every row goes through transition_booking in its own transaction, so
    two sweeps racing on the same row complete it once; the loser sees
    an InvalidTransition and counts the row as skipped
"""

import time
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.core.clock import today
from pg_inventory.core.exceptions import InventoryError, TransactionFailed
from pg_inventory.core.logging import get_logger
from pg_inventory.core.metrics import operation_latency, record_sweep, sweep_runs
from pg_inventory.models.booking import Booking
from pg_inventory.services.booking_service import transition_booking
from pg_inventory.services.lifecycle import BookingStatus, booking_end_date

logger = get_logger(__name__)


@dataclass
class SweepSummary:
    as_of: date
    transitioned_ids: List[int] = field(default_factory=list)
    skipped_ids: List[int] = field(default_factory=list)

    @property
    def transitioned(self) -> int:
        return len(self.transitioned_ids)

    @property
    def skipped(self) -> int:
        return len(self.skipped_ids)


async def find_expired_bookings(db: AsyncSession, as_of: date) -> List[int]:
    """Ids of confirmed bookings whose last rental day is on or before `as_of`."""
    # A booking cannot have ended before it started; the start_date bound
    # narrows the scan, the exact month arithmetic happens below.
    result = await db.execute(
        select(Booking.id, Booking.start_date, Booking.duration_months)
        .where(
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.start_date <= as_of,
        )
        .order_by(Booking.start_date, Booking.id)
    )
    return [
        row.id
        for row in result.all()
        if booking_end_date(row.start_date, row.duration_months) <= as_of
    ]


async def sweep_expired_bookings(db: AsyncSession, as_of: Optional[date] = None) -> SweepSummary:
    """
    Complete every expired confirmed booking, releasing its bed.
    Raises TransactionFailed only if the selection itself fails.
    """
    as_of = as_of or today()
    start_time = time.perf_counter()
    summary = SweepSummary(as_of=as_of)

    try:
        candidates = await find_expired_bookings(db, as_of)
    except SQLAlchemyError as e:
        await db.rollback()
        sweep_runs.labels(result="error").inc()
        raise TransactionFailed("sweep_expired_bookings", reason=e.__class__.__name__) from e

    for booking_id in candidates:
        try:
            await transition_booking(db, booking_id, BookingStatus.COMPLETED)
        except InventoryError as e:
            summary.skipped_ids.append(booking_id)
            logger.info(
                "expired_booking_skipped",
                booking_id=booking_id,
                reason=e.error_code.value,
            )
            continue
        summary.transitioned_ids.append(booking_id)

    record_sweep(summary.transitioned, summary.skipped)
    operation_latency.labels(operation="sweep_expired_bookings").observe(time.perf_counter() - start_time)

    if candidates:
        logger.info(
            "expired_bookings_swept",
            as_of=as_of.isoformat(),
            transitioned=summary.transitioned,
            skipped=summary.skipped,
        )
    return summary


async def sweep_expired_bookings_quietly(
    db: AsyncSession,
    as_of: Optional[date] = None,
) -> Optional[SweepSummary]:
    """Best-effort sweep for the request path: failures are logged, never raised."""
    try:
        return await sweep_expired_bookings(db, as_of)
    except (InventoryError, SQLAlchemyError) as e:
        logger.error("expiry_sweep_failed", error=str(e))
        return None
