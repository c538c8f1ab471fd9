"""
Availability calculator: turns capacity and occupancy into available beds.
"""

from typing import Union

from pg_inventory.services.capacity import RoomType, total_beds


def available_beds(total_rooms: int, room_type: Union[str, RoomType], occupied: int) -> int:
    """
    Beds still free for a configuration.

    Clamped at zero: an overbooked configuration reports no free beds
    rather than a negative count.
    """
    return max(0, total_beds(total_rooms, room_type) - occupied)



def resolve_available_beds(
    total_rooms: int,
    room_type: Union[str, RoomType],
    occupied: int,
    manual_override: bool,
    current: int,
) -> int:
    """The value a full recompute would persist; operator overrides stay frozen."""
    if manual_override:
        return current
    return available_beds(total_rooms, room_type, occupied)
