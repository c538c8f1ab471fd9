from pg_inventory.models.listing import Listing
from pg_inventory.models.room_configuration import RoomConfiguration
from pg_inventory.models.booking import Booking

__all__ = ["Listing", "RoomConfiguration", "Booking"]
