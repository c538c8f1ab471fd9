from pg_inventory.schemas.booking import BookingStatusUpdate, BookingResponse, BookingDeleteResponse
from pg_inventory.schemas.room_configuration import (
    RoomConfigurationSpec,
    ConfigurationSyncRequest,
    ManualOverrideRequest,
    OwnerAvailabilityItem,
    OwnerAvailabilityRequest,
    RoomConfigurationResponse,
    ConfigurationSyncResponse,
    AvailabilityReportResponse,
    ReconcileAllResponse,
)
from pg_inventory.schemas.sweep import SweepSummaryResponse

__all__ = [
    "BookingStatusUpdate", "BookingResponse", "BookingDeleteResponse",
    "RoomConfigurationSpec", "ConfigurationSyncRequest", "ManualOverrideRequest",
    "OwnerAvailabilityItem", "OwnerAvailabilityRequest",
    "RoomConfigurationResponse", "ConfigurationSyncResponse",
    "AvailabilityReportResponse", "ReconcileAllResponse",
    "SweepSummaryResponse",
]
