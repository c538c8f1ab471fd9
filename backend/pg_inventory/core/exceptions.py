"""
Typed errors raised by the inventory engine.

Every error carries a stable error code, the HTTP status the API layer
should answer with, and structured details. The admin layer shows
``message`` as a flash message, so keep it human readable.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    INVALID_ROOM_TYPE = "INVALID_ROOM_TYPE"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CAPACITY_EXHAUSTED = "CAPACITY_EXHAUSTED"
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    BOOKING_MISSING = "BOOKING_MISSING"
    LISTING_MISSING = "LISTING_MISSING"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"


class InventoryError(Exception):
    """Base class for every error the engine surfaces to its callers."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__,
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class InvalidRoomType(InventoryError):
    def __init__(self, room_type: Any):
        super().__init__(
            f"Unknown room type: {room_type!r}",
            ErrorCode.INVALID_ROOM_TYPE,
            {"room_type": room_type},
            status_code=422,
        )


class InvalidConfiguration(InventoryError):
    """A submitted room configuration violates a capacity rule."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_CONFIGURATION, details, status_code=422)


class InvalidTransition(InventoryError):
    def __init__(
        self,
        current: Optional[str],
        target: Any,
        message: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_TRANSITION,
    ):
        self.current = current
        self.target = target
        super().__init__(
            message or f"Invalid booking transition: {current} -> {target}",
            error_code,
            {"from_status": current, "to_status": target},
            status_code=409,
        )


class CapacityExhausted(InvalidTransition):
    """Confirm rejected because the room configuration has no bed left."""

    def __init__(self, current: str, target: str, room_config_id: int):
        super().__init__(
            current,
            target,
            message=f"No beds available in room configuration {room_config_id}",
            error_code=ErrorCode.CAPACITY_EXHAUSTED,
        )
        self.details["room_config_id"] = room_config_id


class ResourceMissing(InventoryError):
    resource_type = "Resource"
    code = ErrorCode.CONFIGURATION_MISSING

    def __init__(self, resource_id: Any):
        self.resource_id = resource_id
        super().__init__(
            f"{self.resource_type} {resource_id} not found",
            self.code,
            {"resource_type": self.resource_type, "resource_id": resource_id},
            status_code=404,
        )


class ConfigurationMissing(ResourceMissing):
    resource_type = "Room configuration"
    code = ErrorCode.CONFIGURATION_MISSING


class BookingMissing(ResourceMissing):
    resource_type = "Booking"
    code = ErrorCode.BOOKING_MISSING


class ListingMissing(ResourceMissing):
    resource_type = "Listing"
    code = ErrorCode.LISTING_MISSING


class TransactionFailed(InventoryError):
    """The store rejected or could not commit the transaction. Retry the whole operation."""

    def __init__(self, operation: str, reason: str = ""):
        self.operation = operation
        super().__init__(
            f"{operation} could not be committed, please retry",
            ErrorCode.TRANSACTION_FAILED,
            {"operation": operation, "reason": reason},
            status_code=503,
        )
