"""
Booking status endpoints used by the admin booking screen.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pg_inventory.api.deps import run_expiry_sweep
from pg_inventory.db.session import get_db
from pg_inventory.schemas.booking import BookingDeleteResponse, BookingResponse, BookingStatusUpdate
from pg_inventory.services.booking_service import delete_booking, get_booking, transition_booking

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("/{booking_id}", response_model=BookingResponse, dependencies=[Depends(run_expiry_sweep)])
async def read_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    return await get_booking(db, booking_id)


@router.post("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Move a booking to a new status.

    Confirming takes a bed from the room configuration and is rejected
    with 409 when none is left; cancelling or completing gives it back.
    """
    return await transition_booking(db, booking_id, payload.status)


@router.delete("/{booking_id}", response_model=BookingDeleteResponse)
async def delete_booking_endpoint(booking_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a booking, releasing its bed if it still held one."""
    booking = await delete_booking(db, booking_id)
    return BookingDeleteResponse(
        message="Booking deleted successfully",
        booking_id=booking.id,
        status=booking.status,
    )
