"""
Bed state transitions within a loaded room.

These functions mutate a ``Room`` already locked by the caller and raise
domain exceptions on any violated precondition. They never flush; the
caller persists the room through ``RoomRepository.save`` so occupancy is
re-derived in the same unit of work.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from hostel_occupancy.core.exceptions import (
    CapacityExceededError,
    ConflictError,
    InvalidStateError,
    InvalidTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_occupancy.models.base.enums import BedStatus, enum_value
from hostel_occupancy.models.room import Bed, Room, STUDENT_SNAPSHOT_FIELDS
from hostel_occupancy.schemas.room.bed_base import normalize_bed_number

__all__ = [
    "find_bed",
    "add_bed",
    "update_bed",
    "delete_bed",
    "set_maintenance",
    "reserve_bed",
    "cancel_reservation",
    "swap_beds",
    "occupy_bed",
    "release_bed",
    "release_hold_for",
]

# Statuses a plain bed update may set; occupancy and holds have their own operations
PATCHABLE_STATUSES = (BedStatus.AVAILABLE, BedStatus.MAINTENANCE)


def find_bed(room: Room, bed_number: str) -> Bed:
    bed = room.get_bed(normalize_bed_number(bed_number))
    if bed is None:
        raise ResourceNotFoundError("Bed", f"{room.room_number}/{bed_number}")
    return bed


def add_bed(
    room: Room,
    bed_number: str,
    rent_amount: Optional[Decimal] = None,
    amenities: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
) -> Bed:
    bed_number = normalize_bed_number(bed_number)
    if room.get_bed(bed_number) is not None:
        raise ConflictError(
            f"Bed {bed_number} already exists in room {room.room_number}",
            details={"bed_number": bed_number},
        )
    if len(room.beds) >= room.capacity:
        raise CapacityExceededError(
            f"Room {room.room_number} is at capacity ({room.capacity} beds)",
            capacity=room.capacity,
            requested=len(room.beds) + 1,
        )

    rent = rent_amount if rent_amount is not None else room.base_rent
    if rent is None:
        raise ValidationError("Bed rent is required when the room has no base rent", field="rent_amount")

    bed = Bed(
        bed_number=bed_number,
        position=room.next_position(),
        status=BedStatus.AVAILABLE,
        is_occupied=False,
        rent_amount=rent,
        amenities=list(amenities or []),
        last_status_change=now,
    )
    room.beds.append(bed)
    return bed


def update_bed(room: Room, bed_number: str, patch: Dict[str, Any], now: Optional[datetime] = None) -> Bed:
    """
    Apply a partial update of rent, amenities and status.

    An occupied bed keeps its status; other beds may be moved between
    available and maintenance.
    """
    bed = find_bed(room, bed_number)
    status = patch.get("status")

    if status is not None:
        status = BedStatus(status)
        if bed.is_occupied:
            if status != BedStatus.OCCUPIED:
                raise InvalidTransitionError(
                    f"Bed {bed.bed_number} is occupied; vacate it before changing its status",
                    from_status=enum_value(bed.status),
                    to_status=status.value,
                )
        elif status not in PATCHABLE_STATUSES:
            raise InvalidTransitionError(
                f"Bed status '{status.value}' can only be set by assignment or reservation",
                from_status=enum_value(bed.status),
                to_status=status.value,
            )
        elif status != bed.status:
            bed.status = status
            bed.held_by_id = None
            bed.reservation_expiry = None
            bed.last_status_change = now

    if patch.get("rent_amount") is not None:
        bed.rent_amount = patch["rent_amount"]
    if patch.get("amenities") is not None:
        bed.amenities = list(patch["amenities"])
    return bed


def delete_bed(room: Room, bed_number: str) -> Bed:
    bed = find_bed(room, bed_number)
    if bed.is_occupied:
        raise ConflictError(f"Cannot delete occupied bed {bed.bed_number}", details={"bed_number": bed.bed_number})
    room.beds.remove(bed)
    return bed


def set_maintenance(room: Room, bed_number: str, now: Optional[datetime] = None) -> Bed:
    bed = find_bed(room, bed_number)
    if bed.is_occupied:
        raise ConflictError(
            f"Cannot put occupied bed {bed.bed_number} under maintenance",
            details={"bed_number": bed.bed_number},
        )
    bed.status = BedStatus.MAINTENANCE
    bed.held_by_id = None
    bed.reservation_expiry = None
    bed.last_status_change = now
    return bed


def reserve_bed(
    room: Room,
    bed_number: str,
    holder_id: str,
    reservation_expiry: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Bed:
    bed = find_bed(room, bed_number)
    if bed.is_occupied or bed.status != BedStatus.AVAILABLE:
        raise ConflictError(
            f"Bed {bed.bed_number} cannot be reserved while {enum_value(bed.status)}",
            details={"bed_number": bed.bed_number, "status": enum_value(bed.status)},
        )
    bed.status = BedStatus.RESERVED
    bed.held_by_id = holder_id
    bed.reservation_expiry = reservation_expiry
    bed.last_status_change = now
    return bed


def cancel_reservation(room: Room, bed_number: str, now: Optional[datetime] = None) -> Bed:
    bed = find_bed(room, bed_number)
    if bed.status != BedStatus.RESERVED:
        raise InvalidStateError(f"Bed {bed.bed_number} is not reserved", current_state=enum_value(bed.status))
    bed.clear_occupancy()
    bed.last_status_change = now
    return bed


def release_hold_for(room: Room, bed_number: str, user_id: str, now: Optional[datetime] = None) -> bool:
    """Free the bed if it is held for ``user_id``. Returns whether a hold was released."""
    bed = room.get_bed(normalize_bed_number(bed_number))
    if bed is None or bed.status != BedStatus.RESERVED or bed.held_by_id != user_id:
        return False
    bed.clear_occupancy()
    bed.last_status_change = now
    return True


def swap_beds(room: Room, bed_number_a: str, bed_number_b: str, now: Optional[datetime] = None):
    """Exchange all occupancy fields between two beds of the same room."""
    bed_a = find_bed(room, bed_number_a)
    bed_b = find_bed(room, bed_number_b)
    if bed_a is bed_b:
        raise ValidationError("Cannot swap a bed with itself", field="bed_number_b")

    snapshot_a = bed_a.occupancy_snapshot()
    bed_a.apply_occupancy(bed_b.occupancy_snapshot())
    bed_b.apply_occupancy(snapshot_a)
    bed_a.last_status_change = now
    bed_b.last_status_change = now
    return bed_a, bed_b


def occupy_bed(
    room: Room,
    bed_number: str,
    occupant_id: Optional[str],
    snapshot: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Bed:
    """
    Mark a bed occupied.

    A reserved bed may only be taken by the user it is held for.
    """
    bed = find_bed(room, bed_number)
    if bed.is_occupied:
        raise ConflictError(f"Bed {bed.bed_number} is already occupied", details={"bed_number": bed.bed_number})
    if bed.status == BedStatus.MAINTENANCE:
        raise ConflictError(f"Bed {bed.bed_number} is under maintenance", details={"bed_number": bed.bed_number})
    if bed.status == BedStatus.RESERVED and (occupant_id is None or bed.held_by_id != occupant_id):
        raise ConflictError(
            f"Bed {bed.bed_number} is reserved for another user",
            details={"bed_number": bed.bed_number},
        )

    snapshot = snapshot or {}
    bed.status = BedStatus.OCCUPIED
    bed.is_occupied = True
    bed.current_occupant_id = occupant_id
    bed.held_by_id = None
    bed.reservation_expiry = None
    for field in STUDENT_SNAPSHOT_FIELDS:
        setattr(bed, field, snapshot.get(field))
    if bed.check_in_date is None:
        bed.check_in_date = now
    bed.last_status_change = now
    return bed


def release_bed(room: Room, bed_number: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Free an occupied bed and return who was in it."""
    bed = find_bed(room, bed_number)
    if not bed.is_occupied:
        raise InvalidStateError(f"Bed {bed.bed_number} is not occupied", current_state=enum_value(bed.status))

    previous = {"current_occupant_id": bed.current_occupant_id}
    previous.update({field: getattr(bed, field) for field in STUDENT_SNAPSHOT_FIELDS})

    bed.clear_occupancy()
    bed.last_status_change = now
    return previous
