"""
Room management within a hostel.
"""

from typing import List

from sqlalchemy.orm import Session

from hostel_occupancy.core.exceptions import CapacityExceededError, ConflictError
from hostel_occupancy.models.booking import ACTIVE_BOOKING_STATUSES
from hostel_occupancy.models.room import Room
from hostel_occupancy.repositories.booking import BookingRepository
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.schemas.room import RoomCreate, RoomUpdate
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.permissions import Principal, require_hostel_manager
from hostel_occupancy.services.inventory import bed_operations
from hostel_occupancy.utils.datetime_utils import utc_now


class RoomService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.hostel_repository = HostelRepository(db_session)
        self.room_repository = RoomRepository(db_session)
        self.booking_repository = BookingRepository(db_session)

    def create_room(self, principal: Principal, hostel_id: str, data: RoomCreate) -> ServiceResult[Room]:
        """
        Create a room and its initial beds in one unit.

        Duplicate bed numbers fail with a conflict and more beds than the
        declared capacity fail with capacity exceeded.
        """

        def unit() -> Room:
            hostel = self.hostel_repository.get_by_id(hostel_id)
            require_hostel_manager(principal, hostel, "create rooms")

            if self.room_repository.find_by_number(hostel_id, data.room_number):
                raise ConflictError(
                    f"Room {data.room_number} already exists in this hostel",
                    details={"room_number": data.room_number},
                )

            now = utc_now()
            room = Room(
                hostel_id=hostel.id,
                room_number=data.room_number,
                floor=data.floor,
                room_type=data.room_type,
                capacity=data.capacity,
                base_rent=data.base_rent,
                amenities=list(data.amenities),
                beds=[],
            )
            for bed in data.beds:
                bed_operations.add_bed(room, bed.bed_number, bed.rent_amount, bed.amenities, now)

            self.room_repository.save(room, now)
            self._log_operation(
                "create_room",
                room.id,
                {"hostel_id": hostel.id, "room_number": room.room_number, "bed_count": len(room.beds)},
            )
            return room

        return self._execute("create room", unit, hostel_id, message="Room created successfully")

    def get_room(self, room_id: str) -> ServiceResult[Room]:
        return self._read("get room", lambda: self.room_repository.get_by_id(room_id), room_id)

    def list_rooms(self, hostel_id: str) -> ServiceResult[List[Room]]:
        def query() -> List[Room]:
            self.hostel_repository.get_by_id(hostel_id)
            return self.room_repository.list_by_hostel(hostel_id)

        return self._read("list rooms", query, hostel_id)

    def update_room(self, principal: Principal, room_id: str, data: RoomUpdate) -> ServiceResult[Room]:
        def unit() -> Room:
            room = self.room_repository.get_for_update(room_id)
            require_hostel_manager(principal, room.hostel, "update rooms")

            changes = data.model_dump(exclude_unset=True)
            capacity = changes.get("capacity")
            if capacity is not None and capacity < len(room.beds):
                raise CapacityExceededError(
                    f"Capacity {capacity} is below the room's {len(room.beds)} beds",
                    capacity=capacity,
                    requested=len(room.beds),
                )

            for key, value in changes.items():
                if value is not None:
                    setattr(room, key, list(value) if key == "amenities" else value)

            self.room_repository.save(room)
            self._log_operation("update_room", room.id, {"fields": sorted(changes)})
            return room

        return self._execute(
            "update room",
            unit,
            room_id,
            message="Room updated successfully",
            attempts=self.retry_attempts,
        )

    def delete_room(self, principal: Principal, room_id: str) -> ServiceResult[bool]:
        def unit() -> bool:
            room = self.room_repository.get_for_update(room_id)
            require_hostel_manager(principal, room.hostel, "delete rooms")

            if any(bed.is_occupied for bed in room.beds):
                raise ConflictError("Cannot delete a room with occupied beds", details={"room_id": room.id})
            active = self.booking_repository.find_by_criteria(
                {"room_id": room.id, "status": list(ACTIVE_BOOKING_STATUSES)},
                limit=1,
            )
            if active:
                raise ConflictError("Cannot delete a room with active bookings", details={"room_id": room.id})

            self.room_repository.delete(room)
            self._log_operation("delete_room", room_id)
            return True

        return self._execute("delete room", unit, room_id, message="Room deleted successfully")
