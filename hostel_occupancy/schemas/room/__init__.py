from hostel_occupancy.schemas.room.bed_base import (
    AvailableBedFilter,
    AvailableBedResponse,
    BedAssignmentRequest,
    BedCreate,
    BedReserveRequest,
    BedResponse,
    BedSwapRequest,
    BedUpdate,
    BulkBedUpdate,
    BulkBedUpdateItem,
    OccupantSnapshot,
    normalize_bed_number,
)
from hostel_occupancy.schemas.room.room_base import RoomCreate, RoomResponse, RoomUpdate

__all__ = [
    "AvailableBedFilter",
    "AvailableBedResponse",
    "BedAssignmentRequest",
    "BedCreate",
    "BedReserveRequest",
    "BedResponse",
    "BedSwapRequest",
    "BedUpdate",
    "BulkBedUpdate",
    "BulkBedUpdateItem",
    "OccupantSnapshot",
    "RoomCreate",
    "RoomResponse",
    "RoomUpdate",
    "normalize_bed_number",
]
