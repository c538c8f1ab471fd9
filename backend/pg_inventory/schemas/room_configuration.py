"""
Pydantic schemas for room configuration requests and responses.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class RoomConfigurationSpec(BaseModel):
    """One row of the listing edit form's room configuration table."""

    id: Optional[int] = None
    room_type: str = Field(..., min_length=1, max_length=50)
    rent_per_month: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    total_rooms: int = Field(..., ge=1)
    available_beds: Optional[int] = Field(None, ge=0)
    manual_override: bool = False


class ConfigurationSyncRequest(BaseModel):
    configurations: list[RoomConfigurationSpec] = Field(default_factory=list)


class ManualOverrideRequest(BaseModel):
    enabled: bool
    available_beds: Optional[int] = Field(None, ge=0)


class OwnerAvailabilityItem(BaseModel):
    room_config_id: int
    available_beds: int = Field(..., ge=0)


class OwnerAvailabilityRequest(BaseModel):
    rooms: list[OwnerAvailabilityItem] = Field(default_factory=list)


class RoomConfigurationResponse(BaseModel):
    id: int
    listing_id: int
    room_type: str
    rent_per_month: Decimal
    total_rooms: int
    total_beds: int
    available_beds: int
    manual_override: bool

    model_config = {"from_attributes": True}


class DeleteBlockedResponse(BaseModel):
    room_config_id: int
    booking_count: int

    model_config = {"from_attributes": True}


class ConfigurationSyncResponse(BaseModel):
    configurations: list[RoomConfigurationResponse]
    created: list[int]
    updated: list[int]
    deleted: list[int]
    blocked: list[DeleteBlockedResponse]

    model_config = {"from_attributes": True}


class AvailabilityReportResponse(BaseModel):
    room_config_id: int
    room_type: str
    total_rooms: int
    total_beds: int
    occupied_beds: int
    stored_available_beds: int
    computed_available_beds: int
    manual_override: bool
    drift: int

    model_config = {"from_attributes": True}


class ReconcileAllResponse(BaseModel):
    processed: int
    updated: int
    skipped: int
    failed: int
    failed_ids: list[int]

    model_config = {"from_attributes": True}
