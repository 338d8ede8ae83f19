"""
Room repository.

A room and its beds are read and written as one unit. Mutations load the
room with a row lock and persist it through ``save``, which re-derives
occupancy and bumps the optimistic version.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from hostel_occupancy.core.exceptions import ResourceNotFoundError
from hostel_occupancy.models.base.enums import BedStatus
from hostel_occupancy.models.room import Bed, Room, recompute_room_occupancy
from hostel_occupancy.repositories.base import BaseRepository
from hostel_occupancy.utils.datetime_utils import utc_now


class RoomRepository(BaseRepository[Room]):
    def __init__(self, db: Session):
        super().__init__(Room, db)

    def get_for_update(self, room_id: str) -> Room:
        """Load a room with its beds, locking the row for this transaction."""
        room = (
            self.db.query(Room)
            .filter(Room.id == room_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if room is None:
            raise ResourceNotFoundError("Room", room_id)
        return room

    def find_by_number(self, hostel_id: str, room_number: str) -> Optional[Room]:
        return (
            self.db.query(Room)
            .filter(Room.hostel_id == hostel_id, Room.room_number == room_number)
            .first()
        )

    def list_by_hostel(self, hostel_id: str) -> List[Room]:
        return (
            self.db.query(Room)
            .filter(Room.hostel_id == hostel_id)
            .order_by(Room.floor, Room.room_number)
            .all()
        )

    def save(self, room: Room, now: Optional[datetime] = None) -> Room:
        """
        Persist a room after any bed or room mutation.

        Touching ``updated_at`` guarantees an UPDATE on the room row, so the
        version check runs even when only beds changed.
        """
        now = now or utc_now()
        recompute_room_occupancy(room, now)
        room.updated_at = now
        flag_modified(room, "updated_at")
        self.db.add(room)
        self.flush()
        return room

    def iter_available_beds(
        self,
        hostel_id: str,
        floor: Optional[int] = None,
        room_type: Optional[str] = None,
        min_rent: Optional[Decimal] = None,
        max_rent: Optional[Decimal] = None,
    ) -> Iterator[Tuple[Room, Bed]]:
        """
        Yield (room, bed) pairs for free beds matching every given filter.

        Each call issues a fresh query.
        """
        query = (
            self.db.query(Room, Bed)
            .join(Bed, Bed.room_id == Room.id)
            .filter(
                Room.hostel_id == hostel_id,
                Bed.status == BedStatus.AVAILABLE,
                Bed.is_occupied.is_(False),
            )
        )
        if floor is not None:
            query = query.filter(Room.floor == floor)
        if room_type is not None:
            query = query.filter(Room.room_type == room_type)
        if min_rent is not None:
            query = query.filter(Bed.rent_amount >= min_rent)
        if max_rent is not None:
            query = query.filter(Bed.rent_amount <= max_rent)

        query = query.order_by(Room.floor, Room.room_number, Bed.position)
        for room, bed in query:
            yield room, bed
