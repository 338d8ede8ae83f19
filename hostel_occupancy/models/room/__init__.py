from hostel_occupancy.models.room.bed import Bed, OCCUPANCY_FIELDS, STUDENT_SNAPSHOT_FIELDS
from hostel_occupancy.models.room.room import Room, recompute_room_occupancy

__all__ = ["Bed", "Room", "recompute_room_occupancy", "OCCUPANCY_FIELDS", "STUDENT_SNAPSHOT_FIELDS"]
