"""
Tests for hostel, room and bed management through the services.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from hostel_occupancy.core.exceptions import ErrorCode
from hostel_occupancy.models.base.enums import BedStatus, RoomStatus, RoomType
from hostel_occupancy.schemas.hostel import HostelAddressUpdate, HostelCreate
from hostel_occupancy.schemas.room import (
    AvailableBedFilter,
    BedCreate,
    BedReserveRequest,
    BedUpdate,
    BulkBedUpdate,
    RoomCreate,
    RoomUpdate,
)
from hostel_occupancy.services.inventory import BedService, HostelService, RoomService


@pytest.fixture
def hostel_service(db):
    return HostelService(db)


@pytest.fixture
def room_service(db):
    return RoomService(db)


@pytest.fixture
def bed_service(db):
    return BedService(db)


class TestHostelService:
    """Hostel creation and address edits."""

    def test_owner_creates_own_hostel(self, hostel_service, owner, owner_principal):
        """The acting owner becomes the hostel owner."""
        result = hostel_service.create_hostel(
            owner_principal,
            HostelCreate(name="Blue Door", address_line1="1 Main St", city="Mumbai"),
        )

        assert result.is_success
        assert result.data.owner_id == owner.id
        assert result.data.rating_count == 0

    def test_student_cannot_create_hostel(self, hostel_service, student_principal):
        """Only owners and admins create hostels."""
        result = hostel_service.create_hostel(
            student_principal,
            HostelCreate(name="Nope", address_line1="1 Main St", city="Mumbai"),
        )

        assert not result.is_success
        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_admin_creates_hostel_for_owner(self, hostel_service, admin_principal, other_owner):
        """Admins may assign the hostel to an existing owner."""
        result = hostel_service.create_hostel(
            admin_principal,
            HostelCreate(name="Red Roof", address_line1="2 Main St", city="Delhi", owner_id=other_owner.id),
        )

        assert result.is_success
        assert result.data.owner_id == other_owner.id

    def test_admin_cannot_assign_non_owner(self, hostel_service, admin_principal, student_user):
        """The assigned owner must hold the owner role."""
        result = hostel_service.create_hostel(
            admin_principal,
            HostelCreate(name="Red Roof", address_line1="2 Main St", city="Delhi", owner_id=student_user.id),
        )

        assert result.error.code == ErrorCode.VALIDATION_ERROR

    def test_update_address(self, hostel_service, hostel, owner_principal):
        """Only the sent address fields change."""
        result = hostel_service.update_address(owner_principal, hostel.id, HostelAddressUpdate(city="Nashik"))

        assert result.is_success
        assert result.data.city == "Nashik"
        assert result.data.address_line1 == "12 College Road"

    def test_foreign_owner_cannot_edit(self, hostel_service, hostel, other_owner_principal):
        """Owners manage only their own hostels."""
        result = hostel_service.update_address(other_owner_principal, hostel.id, HostelAddressUpdate(city="X"))

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_missing_hostel(self, hostel_service):
        """Unknown ids report not found."""
        result = hostel_service.get_hostel("missing")

        assert result.error.code == ErrorCode.NOT_FOUND


class TestRoomService:
    """Room creation, edits and deletion."""

    def test_room_created_with_beds(self, room):
        """Initial beds take the base rent and the room starts available."""
        assert [bed.bed_number for bed in room.beds] == ["A", "B"]
        assert all(bed.rent_amount == Decimal("3000.00") for bed in room.beds)
        assert room.status == RoomStatus.AVAILABLE
        assert room.current_occupancy == 0
        assert room.version == 1

    def test_duplicate_room_number_conflicts(self, room_service, room, hostel, owner_principal):
        """Room numbers are unique per hostel."""
        result = room_service.create_room(
            owner_principal,
            hostel.id,
            RoomCreate(room_number="101", room_type=RoomType.SINGLE, capacity=1, base_rent=Decimal("4000")),
        )

        assert result.error.code == ErrorCode.CONFLICT

    def test_more_beds_than_capacity(self, room_service, hostel, owner_principal):
        """Initial beds may not exceed the declared capacity."""
        result = room_service.create_room(
            owner_principal,
            hostel.id,
            RoomCreate(
                room_number="102",
                room_type=RoomType.SINGLE,
                capacity=1,
                base_rent=Decimal("4000"),
                beds=[BedCreate(bed_number="A"), BedCreate(bed_number="B")],
            ),
        )

        assert result.error.code == ErrorCode.CAPACITY_EXCEEDED
        assert room_service.list_rooms(hostel.id).data == []

    def test_duplicate_initial_beds(self, room_service, hostel, owner_principal):
        """Bed numbers are compared after normalization."""
        result = room_service.create_room(
            owner_principal,
            hostel.id,
            RoomCreate(
                room_number="103",
                room_type=RoomType.DOUBLE,
                capacity=2,
                base_rent=Decimal("4000"),
                beds=[BedCreate(bed_number="a"), BedCreate(bed_number=" A ")],
            ),
        )

        assert result.error.code == ErrorCode.CONFLICT

    def test_capacity_cannot_drop_below_bed_count(self, room_service, room, owner_principal):
        """Shrinking capacity under the existing beds is rejected."""
        result = room_service.update_room(owner_principal, room.id, RoomUpdate(capacity=1))

        assert result.error.code == ErrorCode.CAPACITY_EXCEEDED

    def test_update_room_bumps_version(self, room_service, room, owner_principal):
        """Every room write increments the version."""
        result = room_service.update_room(owner_principal, room.id, RoomUpdate(capacity=3, amenities=["fan"]))

        assert result.is_success
        assert result.data.capacity == 3
        assert result.data.amenities == ["fan"]
        assert result.data.version == 2

    def test_delete_room_with_active_booking(self, room_service, room, make_booking, owner_principal):
        """Rooms with pending or confirmed bookings stay."""
        make_booking()

        result = room_service.delete_room(owner_principal, room.id)

        assert result.error.code == ErrorCode.CONFLICT

    def test_delete_empty_room(self, room_service, room, hostel, owner_principal):
        """An unused room is removed with its beds."""
        result = room_service.delete_room(owner_principal, room.id)

        assert result.is_success
        assert room_service.list_rooms(hostel.id).data == []


class TestBedService:
    """Bed mutations and the available-bed listing."""

    def test_add_bed_until_capacity(self, bed_service, room_service, room, owner_principal):
        """A full room refuses more beds."""
        room_service.update_room(owner_principal, room.id, RoomUpdate(capacity=3))

        added = bed_service.add_bed(owner_principal, room.id, BedCreate(bed_number="c", rent_amount=Decimal("2500")))
        refused = bed_service.add_bed(owner_principal, room.id, BedCreate(bed_number="D"))

        assert added.is_success
        assert added.data.bed_number == "C"
        assert added.data.rent_amount == Decimal("2500.00")
        assert refused.error.code == ErrorCode.CAPACITY_EXCEEDED

    def test_reserve_and_cancel(self, bed_service, room, owner_principal, student_user):
        """A hold records the holder and frees the bed when cancelled."""
        expiry = datetime(2030, 1, 1, 10, 0, tzinfo=timezone.utc)

        reserved = bed_service.reserve_bed(
            owner_principal,
            room.id,
            "a",
            BedReserveRequest(user_id=student_user.id, reservation_expiry=expiry),
        )
        assert reserved.is_success
        assert reserved.data.status == BedStatus.RESERVED
        assert reserved.data.held_by_id == student_user.id
        assert reserved.data.current_occupant_id is None
        assert reserved.data.reservation_expiry == datetime(2030, 1, 1, 10, 0)

        cancelled = bed_service.cancel_reservation(owner_principal, room.id, "A")
        assert cancelled.data.status == BedStatus.AVAILABLE
        assert cancelled.data.held_by_id is None

    def test_reserve_for_unknown_user(self, bed_service, room, owner_principal):
        """Holds need an existing user."""
        result = bed_service.reserve_bed(owner_principal, room.id, "A", BedReserveRequest(user_id="ghost"))

        assert result.error.code == ErrorCode.NOT_FOUND

    def test_student_cannot_mutate_beds(self, bed_service, room, student_principal):
        """Bed changes are reserved for the hostel's managers."""
        result = bed_service.set_maintenance(student_principal, room.id, "A")

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_maintenance_changes_room_status(self, bed_service, room_service, room, owner_principal):
        """The derived room status follows its beds."""
        bed_service.set_maintenance(owner_principal, room.id, "B")

        reloaded = room_service.get_room(room.id).data
        assert reloaded.get_bed("B").status == BedStatus.MAINTENANCE
        assert reloaded.status == RoomStatus.MAINTENANCE

    def test_update_bed_status(self, bed_service, room, owner_principal):
        """Plain updates move beds between available and maintenance only."""
        ok = bed_service.update_bed(owner_principal, room.id, "A", BedUpdate(status=BedStatus.MAINTENANCE))
        bad = bed_service.update_bed(owner_principal, room.id, "B", BedUpdate(status=BedStatus.OCCUPIED))

        assert ok.data.status == BedStatus.MAINTENANCE
        assert bad.error.code == ErrorCode.INVALID_TRANSITION

    def test_bulk_update_reports_failures(self, bed_service, room, owner_principal):
        """Rejected items do not block the others."""
        result = bed_service.bulk_update_beds(
            owner_principal,
            room.id,
            BulkBedUpdate(
                updates=[
                    {"bed_number": "A", "rent_amount": Decimal("3200")},
                    {"bed_number": "Z", "rent_amount": Decimal("3200")},
                ]
            ),
        )

        assert result.is_success
        assert [bed.bed_number for bed in result.data["updated"]] == ["A"]
        assert result.data["failed"][0]["bed_number"] == "Z"
        assert result.data["failed"][0]["code"] == ErrorCode.NOT_FOUND.value

    def test_delete_bed(self, bed_service, room, owner_principal):
        """Free beds can be deleted."""
        result = bed_service.delete_bed(owner_principal, room.id, "B")

        assert result.is_success
        assert [bed.bed_number for bed in bed_service.list_beds(room.id).data] == ["A"]

    def test_available_beds_skip_held_beds(self, bed_service, room, hostel, owner_principal, student_user):
        """Reserved and maintenance beds are not listed."""
        bed_service.reserve_bed(owner_principal, room.id, "A", BedReserveRequest(user_id=student_user.id))

        beds = list(bed_service.list_available_beds(hostel.id).data)

        assert [(bed.room_number, bed.bed_number) for bed in beds] == [("101", "B")]

    def test_available_beds_filters(self, bed_service, room, hostel, owner_principal):
        """Every filter must match."""
        bed_service.update_bed(owner_principal, room.id, "B", BedUpdate(rent_amount=Decimal("4500")))

        cheap = list(bed_service.list_available_beds(hostel.id, AvailableBedFilter(max_rent=Decimal("3500"))).data)
        single = list(bed_service.list_available_beds(hostel.id, AvailableBedFilter(room_type=RoomType.SINGLE)).data)

        assert [bed.bed_number for bed in cheap] == ["A"]
        assert single == []

    def test_available_beds_unknown_hostel(self, bed_service):
        """Listing for a missing hostel fails up front."""
        result = bed_service.list_available_beds("missing")

        assert result.error.code == ErrorCode.NOT_FOUND
