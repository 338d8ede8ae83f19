"""
Room model and its derived occupancy rule.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import ForeignKey, Integer, JSON, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_occupancy.models.base.base_model import TimestampModel
from hostel_occupancy.models.base.enums import BedStatus, RoomStatus, RoomType
from hostel_occupancy.models.room.bed import Bed

__all__ = ["Room", "recompute_room_occupancy"]


class Room(TimestampModel):
    """
    Room within a hostel, owning an ordered collection of beds.

    The ``version`` column is bumped on every persist so concurrent writers
    of the same room are detected.
    """

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("hostel_id", "room_number", name="uq_room_hostel_room_number"),
    )

    hostel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_number: Mapped[str] = mapped_column(String(20), nullable=False)
    floor: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    room_type: Mapped[RoomType] = mapped_column(String(20), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    # Default rent for beds added without one
    base_rent: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Derived
    current_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[RoomStatus] = mapped_column(
        String(20),
        nullable=False,
        default=RoomStatus.AVAILABLE,
        index=True,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    hostel: Mapped["Hostel"] = relationship("Hostel", back_populates="rooms")
    beds: Mapped[List[Bed]] = relationship(
        Bed,
        back_populates="room",
        cascade="all, delete-orphan",
        order_by=Bed.position,
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def bed_map(self) -> Dict[str, Bed]:
        return {bed.bed_number: bed for bed in self.beds}

    def get_bed(self, bed_number: str) -> Optional[Bed]:
        return self.bed_map.get(bed_number)

    def next_position(self) -> int:
        return max((bed.position for bed in self.beds), default=-1) + 1

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, room_number={self.room_number}, occupancy={self.current_occupancy}/{self.capacity})>"


def recompute_room_occupancy(room: Room, now: Optional[datetime] = None) -> Room:
    """
    Re-derive occupancy count and status from the room's beds.

    Also re-aligns each bed's ``is_occupied`` flag with its status and stamps
    ``last_status_change`` when the flag moved.
    """
    for bed in room.beds:
        occupied = bed.status == BedStatus.OCCUPIED
        if bed.is_occupied != occupied:
            bed.is_occupied = occupied
            if now is not None:
                bed.last_status_change = now

    room.current_occupancy = sum(1 for bed in room.beds if bed.is_occupied)

    if room.current_occupancy == room.capacity:
        room.status = RoomStatus.FULLY_OCCUPIED
    elif any(bed.status == BedStatus.MAINTENANCE for bed in room.beds):
        room.status = RoomStatus.MAINTENANCE
    else:
        room.status = RoomStatus.AVAILABLE
    return room
