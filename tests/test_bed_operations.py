"""
Unit tests for bed transitions and the derived room occupancy, on
unsaved rooms.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from hostel_occupancy.core.exceptions import (
    CapacityExceededError,
    ConflictError,
    InvalidStateError,
    InvalidTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_occupancy.models.base.enums import BedStatus, RoomStatus, RoomType
from hostel_occupancy.models.room import Room, recompute_room_occupancy
from hostel_occupancy.services.inventory import bed_operations

NOW = datetime(2026, 10, 1, 12, 0, 0)


def make_room(capacity=2, bed_numbers=("A", "B"), base_rent=Decimal("3000.00")):
    room = Room(
        hostel_id="hostel-1",
        room_number="101",
        floor=1,
        room_type=RoomType.DOUBLE,
        capacity=capacity,
        base_rent=base_rent,
        amenities=[],
        beds=[],
    )
    for number in bed_numbers:
        bed_operations.add_bed(room, number, now=NOW)
    return recompute_room_occupancy(room, NOW)


class TestRoomOccupancy:
    """Derived occupancy count and room status."""

    def test_new_room_is_available(self):
        """A room with only free beds is available and empty."""
        room = make_room()

        assert room.current_occupancy == 0
        assert room.status == RoomStatus.AVAILABLE

    def test_room_is_full_when_every_bed_is_occupied(self):
        """Occupancy equal to capacity means fully occupied."""
        room = make_room()
        bed_operations.occupy_bed(room, "A", "user-1", now=NOW)
        bed_operations.occupy_bed(room, "B", "user-2", now=NOW)

        recompute_room_occupancy(room, NOW)

        assert room.current_occupancy == 2
        assert room.status == RoomStatus.FULLY_OCCUPIED

    def test_maintenance_bed_marks_room_under_maintenance(self):
        """Any bed under maintenance wins over available when the room is not full."""
        room = make_room()
        bed_operations.set_maintenance(room, "B", NOW)

        recompute_room_occupancy(room, NOW)

        assert room.status == RoomStatus.MAINTENANCE

    def test_fewer_beds_than_capacity_never_full(self):
        """A single occupied bed in a double room leaves the room available."""
        room = make_room(bed_numbers=("A",))
        bed_operations.occupy_bed(room, "A", "user-1", now=NOW)

        recompute_room_occupancy(room, NOW)

        assert room.current_occupancy == 1
        assert room.status == RoomStatus.AVAILABLE

    def test_occupied_flag_follows_status(self):
        """The is_occupied flag is re-aligned with the bed status and stamped."""
        room = make_room()
        bed = room.get_bed("A")
        bed.status = BedStatus.OCCUPIED
        later = datetime(2026, 10, 2)

        recompute_room_occupancy(room, later)

        assert bed.is_occupied is True
        assert bed.last_status_change == later
        assert room.current_occupancy == 1


class TestAddAndDelete:
    """Adding and removing beds."""

    def test_bed_number_is_normalized(self):
        """Bed numbers are trimmed and upper-cased."""
        room = make_room(capacity=3)

        bed = bed_operations.add_bed(room, "  c1 ", now=NOW)

        assert bed.bed_number == "C1"
        assert bed.position == 2
        assert bed.rent_amount == Decimal("3000.00")

    def test_duplicate_bed_number_conflicts(self):
        """A bed number is unique within its room."""
        room = make_room(capacity=3)

        with pytest.raises(ConflictError):
            bed_operations.add_bed(room, "a", now=NOW)

    def test_adding_beyond_capacity_fails(self):
        """The bed count can never exceed the room capacity."""
        room = make_room()

        with pytest.raises(CapacityExceededError):
            bed_operations.add_bed(room, "C", now=NOW)

    def test_rent_required_without_base_rent(self):
        """A bed needs its own rent when the room has none."""
        room = make_room(bed_numbers=(), base_rent=None)

        with pytest.raises(ValidationError):
            bed_operations.add_bed(room, "A", now=NOW)

    def test_delete_occupied_bed_conflicts(self):
        """Occupied beds cannot be removed."""
        room = make_room()
        bed_operations.occupy_bed(room, "A", "user-1", now=NOW)

        with pytest.raises(ConflictError):
            bed_operations.delete_bed(room, "A")

    def test_delete_free_bed(self):
        """Deleting a free bed removes it from the room."""
        room = make_room()

        bed_operations.delete_bed(room, "B")

        assert [bed.bed_number for bed in room.beds] == ["A"]

    def test_unknown_bed_not_found(self):
        """Looking up a missing bed raises not found."""
        room = make_room()

        with pytest.raises(ResourceNotFoundError):
            bed_operations.find_bed(room, "Z")


class TestStatusChanges:
    """Plain updates, maintenance and holds."""

    def test_occupied_bed_keeps_its_status(self):
        """An update cannot move an occupied bed out of occupied."""
        room = make_room()
        bed_operations.occupy_bed(room, "A", "user-1", now=NOW)

        with pytest.raises(InvalidTransitionError):
            bed_operations.update_bed(room, "A", {"status": BedStatus.AVAILABLE}, NOW)

    def test_reserved_status_needs_a_reservation(self):
        """Reserved and occupied are not settable through a plain update."""
        room = make_room()

        with pytest.raises(InvalidTransitionError):
            bed_operations.update_bed(room, "A", {"status": BedStatus.RESERVED}, NOW)

    def test_update_rent_and_maintenance(self):
        """Rent, amenities and the maintenance status are patchable."""
        room = make_room()

        bed = bed_operations.update_bed(
            room,
            "A",
            {"status": BedStatus.MAINTENANCE, "rent_amount": Decimal("3500.00"), "amenities": ["locker"]},
            NOW,
        )

        assert bed.status == BedStatus.MAINTENANCE
        assert bed.rent_amount == Decimal("3500.00")
        assert bed.amenities == ["locker"]

    def test_occupied_bed_cannot_go_under_maintenance(self):
        """Maintenance requires an empty bed."""
        room = make_room()
        bed_operations.occupy_bed(room, "A", "user-1", now=NOW)

        with pytest.raises(ConflictError):
            bed_operations.set_maintenance(room, "A", NOW)

    def test_reservation_holds_without_occupant(self):
        """A hold records the holder and never the occupant."""
        room = make_room()
        expiry = datetime(2026, 10, 5)

        bed = bed_operations.reserve_bed(room, "A", "user-1", expiry, NOW)

        assert bed.status == BedStatus.RESERVED
        assert bed.held_by_id == "user-1"
        assert bed.current_occupant_id is None
        assert bed.reservation_expiry == expiry
        assert bed.is_occupied is False

    def test_reserving_a_held_bed_conflicts(self):
        """Only an available bed can be reserved."""
        room = make_room()
        bed_operations.reserve_bed(room, "A", "user-1", now=NOW)

        with pytest.raises(ConflictError):
            bed_operations.reserve_bed(room, "A", "user-2", now=NOW)

    def test_cancel_reservation_frees_the_bed(self):
        """Cancelling a hold returns the bed to available."""
        room = make_room()
        bed_operations.reserve_bed(room, "A", "user-1", now=NOW)

        bed = bed_operations.cancel_reservation(room, "A", NOW)

        assert bed.status == BedStatus.AVAILABLE
        assert bed.held_by_id is None

    def test_cancel_reservation_of_free_bed_fails(self):
        """There is nothing to cancel on an unreserved bed."""
        room = make_room()

        with pytest.raises(InvalidStateError):
            bed_operations.cancel_reservation(room, "A", NOW)

    def test_release_hold_only_for_holder(self):
        """A hold is released only for the user it is held for."""
        room = make_room()
        bed_operations.reserve_bed(room, "A", "user-1", now=NOW)

        assert bed_operations.release_hold_for(room, "A", "user-2", NOW) is False
        assert bed_operations.release_hold_for(room, "A", "user-1", NOW) is True
        assert room.get_bed("A").status == BedStatus.AVAILABLE


class TestOccupancy:
    """Occupying, releasing and swapping beds."""

    def test_reserved_bed_rejects_other_users(self):
        """A held bed can only be taken by its holder."""
        room = make_room()
        bed_operations.reserve_bed(room, "A", "user-1", now=NOW)

        with pytest.raises(ConflictError):
            bed_operations.occupy_bed(room, "A", "user-2", now=NOW)

    def test_holder_takes_reserved_bed(self):
        """Occupying a held bed as its holder clears the hold."""
        room = make_room()
        bed_operations.reserve_bed(room, "A", "user-1", now=NOW)

        bed = bed_operations.occupy_bed(room, "A", "user-1", {"student_name": "Sam"}, NOW)

        assert bed.status == BedStatus.OCCUPIED
        assert bed.current_occupant_id == "user-1"
        assert bed.held_by_id is None
        assert bed.student_name == "Sam"
        assert bed.check_in_date == NOW

    def test_occupied_bed_rejects_second_occupant(self):
        """A bed holds one occupant at a time."""
        room = make_room()
        bed_operations.occupy_bed(room, "A", "user-1", now=NOW)

        with pytest.raises(ConflictError):
            bed_operations.occupy_bed(room, "A", "user-2", now=NOW)

    def test_release_returns_previous_occupant(self):
        """Releasing reports who was in the bed and clears the snapshot."""
        room = make_room()
        bed_operations.occupy_bed(room, "A", "user-1", {"student_name": "Sam", "student_code": "S-1"}, NOW)

        previous = bed_operations.release_bed(room, "A", NOW)

        bed = room.get_bed("A")
        assert previous["current_occupant_id"] == "user-1"
        assert previous["student_name"] == "Sam"
        assert bed.status == BedStatus.AVAILABLE
        assert bed.current_occupant_id is None
        assert bed.student_name is None

    def test_release_of_free_bed_fails(self):
        """Only occupied beds can be released."""
        room = make_room()

        with pytest.raises(InvalidStateError):
            bed_operations.release_bed(room, "A", NOW)

    def test_swap_exchanges_occupancy(self):
        """Every occupancy field moves with its occupant; rent stays with the bed."""
        room = make_room()
        room.get_bed("B").rent_amount = Decimal("3500.00")
        bed_operations.occupy_bed(room, "A", "user-1", {"student_name": "Sam"}, NOW)
        bed_operations.reserve_bed(room, "B", "user-2", now=NOW)

        bed_a, bed_b = bed_operations.swap_beds(room, "A", "B", NOW)

        assert bed_a.status == BedStatus.RESERVED
        assert bed_a.held_by_id == "user-2"
        assert bed_a.current_occupant_id is None
        assert bed_b.status == BedStatus.OCCUPIED
        assert bed_b.current_occupant_id == "user-1"
        assert bed_b.student_name == "Sam"
        assert bed_b.rent_amount == Decimal("3500.00")

    def test_swap_with_itself_fails(self):
        """Both sides of a swap must be different beds."""
        room = make_room()

        with pytest.raises(ValidationError):
            bed_operations.swap_beds(room, "A", "a", NOW)
