"""
Booking lifecycle state machine.

    pending ──► confirmed ──► completed
       │            │
       └──► cancelled ◄┘        (cancelled ──► confirmed is allowed)

Each allowed transition carries the inventory effect it has on the owning
room configuration under the delta model. Creating a booking in `pending`
does not touch inventory; the confirm transition is the capacity gate.
A RELEASE from `pending` is capped in the store (see counters.return_bed),
so cancelling a booking that never held a bed cannot free one.
"""

from datetime import date, timedelta
from enum import Enum, IntEnum
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from pg_inventory.core.exceptions import InvalidTransition


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class InventoryEffect(IntEnum):
    CLAIM = -1
    NONE = 0
    RELEASE = 1


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

TRANSITIONS = {
    (BookingStatus.PENDING, BookingStatus.CANCELLED): InventoryEffect.RELEASE,
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): InventoryEffect.RELEASE,
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): InventoryEffect.CLAIM,
    (BookingStatus.CANCELLED, BookingStatus.CONFIRMED): InventoryEffect.CLAIM,
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): InventoryEffect.RELEASE,
}

DEFAULT_DURATION_MONTHS = 1


def parse_status(value: Union[str, BookingStatus], current: Optional[str] = None) -> BookingStatus:
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidTransition(current, value, message=f"Unknown booking status: {value!r}") from None


def inventory_effect(current: Union[str, BookingStatus], target: Union[str, BookingStatus]) -> InventoryEffect:
    """Effect of moving a booking from `current` to `target`; raises if not allowed."""
    source = parse_status(current)
    destination = parse_status(target, current=source.value)
    try:
        return TRANSITIONS[(source, destination)]
    except KeyError:
        error = InvalidTransition(source.value, destination.value)
        error.details["allowed"] = sorted(status.value for status in allowed_targets(source))
        raise error from None


def deletion_effect(status: Union[str, BookingStatus]) -> InventoryEffect:
    """A deleted booking gives back the bed it was holding, like a cancellation."""
    if parse_status(status) in ACTIVE_STATUSES:
        return InventoryEffect.RELEASE
    return InventoryEffect.NONE


def allowed_targets(status: Union[str, BookingStatus]) -> set:
    source = parse_status(status)
    return {target for (origin, target) in TRANSITIONS if origin is source}


def booking_end_date(start_date: date, duration_months: Optional[int]) -> date:
    """Last day of the rental: start + N calendar months - 1 day."""
    months = duration_months or DEFAULT_DURATION_MONTHS
    return start_date + relativedelta(months=months) - timedelta(days=1)
