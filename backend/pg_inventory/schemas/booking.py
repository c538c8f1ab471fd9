"""
Pydantic schemas for booking status changes.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class BookingStatusUpdate(BaseModel):
    status: str


class BookingResponse(BaseModel):
    id: int
    room_config_id: int
    status: str
    start_date: date
    end_date: date
    duration_months: Optional[int]
    amount: Optional[Decimal]
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingDeleteResponse(BaseModel):
    message: str
    booking_id: int
    status: str
