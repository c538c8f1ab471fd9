"""
Capacity model: how many beds a room configuration holds.

Room types are persisted as the legacy admin-form tags ("double sharing",
"4 sharing", ...). Input tags are normalised before lookup so that
"Double", " double sharing " and "DOUBLE SHARING" all resolve to the same
canonical tag. An unknown tag is always an error; it never falls back to
one bed per room.
"""

from enum import Enum
from typing import Union

from pg_inventory.core.exceptions import InvalidRoomType


class RoomType(str, Enum):
    SINGLE = "single sharing"
    DOUBLE = "double sharing"
    TRIPLE = "triple sharing"
    QUAD = "4 sharing"


# Keyed by the persisted tag so the same table drives the SQL expression
# in RoomConfiguration.total_beds.
BEDS_PER_ROOM = {
    RoomType.SINGLE.value: 1,
    RoomType.DOUBLE.value: 2,
    RoomType.TRIPLE.value: 3,
    RoomType.QUAD.value: 4,
}

_ALIASES = {
    "single": RoomType.SINGLE,
    "single sharing": RoomType.SINGLE,
    "double": RoomType.DOUBLE,
    "double sharing": RoomType.DOUBLE,
    "triple": RoomType.TRIPLE,
    "triple sharing": RoomType.TRIPLE,
    "quad": RoomType.QUAD,
    "quad sharing": RoomType.QUAD,
    "four sharing": RoomType.QUAD,
    "4 sharing": RoomType.QUAD,
}


def normalize_room_type(room_type: Union[str, RoomType]) -> RoomType:
    if isinstance(room_type, RoomType):
        return room_type
    if not isinstance(room_type, str):
        raise InvalidRoomType(room_type)
    key = " ".join(room_type.strip().lower().split())
    try:
        return _ALIASES[key]
    except KeyError:
        raise InvalidRoomType(room_type) from None


def beds_per_room(room_type: Union[str, RoomType]) -> int:
    return BEDS_PER_ROOM[normalize_room_type(room_type).value]


def total_beds(total_rooms: int, room_type: Union[str, RoomType]) -> int:
    return total_rooms * beds_per_room(room_type)
