"""
Bed model.

Beds are owned by their room and always read and written through it; they
are identified by ``bed_number`` within the room.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_occupancy.models.base.base_model import TimestampModel
from hostel_occupancy.models.base.enums import BedStatus

__all__ = ["Bed", "OCCUPANCY_FIELDS", "STUDENT_SNAPSHOT_FIELDS"]


# Denormalized copy of the occupant shown on room views
STUDENT_SNAPSHOT_FIELDS = (
    "student_code",
    "student_name",
    "student_phone",
    "student_email",
    "check_in_date",
)

# Everything exchanged by a swap or reported on vacate
OCCUPANCY_FIELDS = (
    "status",
    "is_occupied",
    "current_occupant_id",
    "held_by_id",
    "reservation_expiry",
) + STUDENT_SNAPSHOT_FIELDS


class Bed(TimestampModel):
    """
    Individual bed within a room.

    ``is_occupied`` is true exactly when ``status`` is occupied. Reservation
    holds use ``held_by_id`` and never touch ``current_occupant_id``.
    """

    __tablename__ = "beds"
    __table_args__ = (
        UniqueConstraint("room_id", "bed_number", name="uq_bed_room_bed_number"),
    )

    room_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bed_number: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Status
    status: Mapped[BedStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BedStatus.AVAILABLE,
        index=True,
    )
    is_occupied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    last_status_change: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Occupancy
    current_occupant_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    held_by_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reservation_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Pricing and features
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Student snapshot
    student_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    student_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    student_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    student_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    check_in_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    room: Mapped["Room"] = relationship("Room", back_populates="beds")

    @property
    def is_available(self) -> bool:
        return self.status == BedStatus.AVAILABLE and not self.is_occupied

    def is_bookable_by(self, user_id: Optional[str]) -> bool:
        """Free, or held for this user."""
        if self.is_available:
            return True
        return (
            self.status == BedStatus.RESERVED
            and not self.is_occupied
            and user_id is not None
            and self.held_by_id == user_id
        )

    def occupancy_snapshot(self) -> Dict[str, Any]:
        return {field: getattr(self, field) for field in OCCUPANCY_FIELDS}

    def apply_occupancy(self, snapshot: Dict[str, Any]) -> None:
        for field in OCCUPANCY_FIELDS:
            setattr(self, field, snapshot.get(field))

    def clear_occupancy(self) -> None:
        """Reset to a free bed with no occupant, hold or snapshot."""
        self.status = BedStatus.AVAILABLE
        self.is_occupied = False
        self.current_occupant_id = None
        self.held_by_id = None
        self.reservation_expiry = None
        for field in STUDENT_SNAPSHOT_FIELDS:
            setattr(self, field, None)

    def __repr__(self) -> str:
        return f"<Bed(room_id={self.room_id}, bed_number={self.bed_number}, status={self.status})>"
