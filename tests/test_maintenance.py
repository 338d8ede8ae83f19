"""
Tests for maintenance tickets and the way they take beds offline.
"""

from decimal import Decimal

import pytest

from hostel_occupancy.core.exceptions import ErrorCode
from hostel_occupancy.models.base.enums import (
    BedStatus,
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
    RoomStatus,
)
from hostel_occupancy.models.hostel import Hostel
from hostel_occupancy.schemas.maintenance import (
    MaintenanceAssignRequest,
    MaintenanceCreate,
    MaintenanceFeedbackRequest,
    MaintenanceFilter,
    MaintenanceStatusUpdate,
)
from hostel_occupancy.schemas.room import BedUpdate
from hostel_occupancy.services.inventory import BedService
from hostel_occupancy.services.maintenance import MaintenanceService


@pytest.fixture
def maintenance_service(db):
    return MaintenanceService(db)


@pytest.fixture
def bed_service(db):
    return BedService(db)


def ticket(hostel, room=None, bed_number=None, **overrides):
    fields = dict(
        hostel_id=hostel.id,
        room_id=room.id if room is not None else None,
        bed_number=bed_number,
        category=MaintenanceCategory.PLUMBING,
        description="Tap next to the bed is leaking",
    )
    fields.update(overrides)
    return MaintenanceCreate(**fields)


@pytest.fixture
def raise_ticket(maintenance_service, hostel, room, owner_principal):
    """Raise a ticket (on bed B by default) and return it."""

    def _raise(principal=None, bed_number="B", **overrides):
        result = maintenance_service.create_request(
            principal or owner_principal,
            ticket(hostel, room, bed_number, **overrides),
        )
        assert result.is_success, result.error
        return result.data

    return _raise


def bed_status(bed_service, room, bed_number):
    return BedStatus(bed_service.get_bed(room.id, bed_number).data.status)


def close(maintenance_service, principal, request, status=MaintenanceStatus.COMPLETED, **fields):
    return maintenance_service.update_status(principal, request.id, MaintenanceStatusUpdate(status=status, **fields))


class TestRaise:
    def test_free_bed_goes_offline(self, raise_ticket, bed_service, room):
        """Raising a ticket on an available bed moves it into maintenance."""
        request = raise_ticket()

        assert request.status == MaintenanceStatus.PENDING
        assert request.bed_offline is True
        assert bed_status(bed_service, room, "B") == BedStatus.MAINTENANCE
        assert room.status == RoomStatus.MAINTENANCE

    def test_occupied_bed_keeps_its_occupant(self, raise_ticket, bed_service, room, checked_in_booking, student_principal):
        """A resident reporting their own bed does not get moved out."""
        request = raise_ticket(principal=student_principal, bed_number="A")

        assert request.bed_offline is False
        assert bed_status(bed_service, room, "A") == BedStatus.OCCUPIED

    def test_hostel_wide_ticket(self, maintenance_service, hostel, owner_principal):
        result = maintenance_service.create_request(owner_principal, ticket(hostel, category=MaintenanceCategory.CLEANING))

        assert result.is_success, result.error
        assert result.data.room_id is None
        assert result.data.bed_offline is False

    def test_non_resident_cannot_raise(self, maintenance_service, hostel, room, other_student_principal):
        result = maintenance_service.create_request(other_student_principal, ticket(hostel, room, "B"))

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_staff_can_raise(self, raise_ticket, staff_principal):
        assert raise_ticket(principal=staff_principal).bed_offline is True

    def test_room_must_belong_to_hostel(self, db, maintenance_service, room, other_owner, admin_principal):
        other = Hostel(owner_id=other_owner.id, name="Blue Door Hostel", address_line1="4 Lake Road", city="Pune")
        db.add(other)
        db.commit()

        result = maintenance_service.create_request(admin_principal, ticket(other, room, "B"))

        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == "room_id"

    def test_unknown_bed(self, maintenance_service, hostel, room, owner_principal):
        result = maintenance_service.create_request(owner_principal, ticket(hostel, room, "Z"))

        assert result.error.code == ErrorCode.NOT_FOUND

    def test_bed_needs_room(self, hostel):
        with pytest.raises(ValueError):
            ticket(hostel, bed_number="A")


class TestLifecycle:
    def test_completion_returns_bed(self, maintenance_service, raise_ticket, bed_service, room, owner_principal):
        request = raise_ticket()

        result = close(maintenance_service, owner_principal, request, actual_cost=Decimal("450"))

        assert result.data.status == MaintenanceStatus.COMPLETED
        assert result.data.completion_date is not None
        assert result.data.actual_cost == Decimal("450")
        assert bed_status(bed_service, room, "B") == BedStatus.AVAILABLE
        assert room.status == RoomStatus.AVAILABLE

    def test_cancellation_returns_bed(self, maintenance_service, raise_ticket, bed_service, room, owner_principal):
        request = raise_ticket()

        close(maintenance_service, owner_principal, request, MaintenanceStatus.CANCELLED)

        assert bed_status(bed_service, room, "B") == BedStatus.AVAILABLE

    def test_bed_waits_for_last_open_ticket(self, maintenance_service, raise_ticket, bed_service, room, owner_principal):
        first = raise_ticket()
        second = raise_ticket(category=MaintenanceCategory.ELECTRICAL)
        assert second.bed_offline is True

        close(maintenance_service, owner_principal, first)
        assert bed_status(bed_service, room, "B") == BedStatus.MAINTENANCE

        close(maintenance_service, owner_principal, second)
        assert bed_status(bed_service, room, "B") == BedStatus.AVAILABLE

    def test_closed_ticket_stays_closed(self, maintenance_service, raise_ticket, owner_principal):
        request = raise_ticket()
        close(maintenance_service, owner_principal, request)

        result = close(maintenance_service, owner_principal, request, MaintenanceStatus.IN_PROGRESS)

        assert result.error.code == ErrorCode.INVALID_TRANSITION
        assert result.error.details["from_status"] == "completed"

    def test_manual_release_refused_while_ticket_open(self, raise_ticket, bed_service, room, owner_principal):
        """The bed cannot be marked available behind an open ticket's back."""
        raise_ticket()

        result = bed_service.update_bed(owner_principal, room.id, "B", BedUpdate(status=BedStatus.AVAILABLE))

        assert result.error.code == ErrorCode.CONFLICT
        assert bed_status(bed_service, room, "B") == BedStatus.MAINTENANCE

    def test_manual_maintenance_released_by_ticket(
        self, maintenance_service, raise_ticket, bed_service, room, owner_principal
    ):
        """A ticket opened on a bed already under maintenance takes over its release."""
        bed_service.set_maintenance(owner_principal, room.id, "B")
        request = raise_ticket()
        assert request.bed_offline is True

        close(maintenance_service, owner_principal, request)

        assert bed_status(bed_service, room, "B") == BedStatus.AVAILABLE

    def test_assign_starts_work(self, maintenance_service, raise_ticket, bed_service, room, staff_user, owner_principal):
        request = raise_ticket()

        result = maintenance_service.assign(
            owner_principal,
            request.id,
            MaintenanceAssignRequest(staff_id=staff_user.id, estimated_cost=Decimal("500")),
        )

        assert result.data.status == MaintenanceStatus.IN_PROGRESS
        assert result.data.assigned_to == staff_user.id
        assert result.data.assigned_at is not None
        assert bed_status(bed_service, room, "B") == BedStatus.MAINTENANCE

    def test_assign_needs_staff_member(self, maintenance_service, raise_ticket, student_user, owner_principal):
        request = raise_ticket()

        result = maintenance_service.assign(owner_principal, request.id, MaintenanceAssignRequest(staff_id=student_user.id))

        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == "staff_id"

    def test_staff_may_update_status(self, maintenance_service, raise_ticket, staff_principal):
        request = raise_ticket()

        result = close(maintenance_service, staff_principal, request, MaintenanceStatus.IN_PROGRESS)

        assert result.data.status == MaintenanceStatus.IN_PROGRESS

    def test_guest_may_not_update_status(self, maintenance_service, raise_ticket, student_principal):
        request = raise_ticket()

        result = close(maintenance_service, student_principal, request)

        assert result.error.code == ErrorCode.UNAUTHORIZED


class TestFeedback:
    @pytest.fixture
    def resident_ticket(self, raise_ticket, checked_in_booking, student_principal):
        return raise_ticket(principal=student_principal, bed_number="A")

    def test_only_after_completion(self, maintenance_service, resident_ticket, student_principal):
        result = maintenance_service.add_feedback(
            student_principal, resident_ticket.id, MaintenanceFeedbackRequest(rating=4)
        )

        assert result.error.code == ErrorCode.INVALID_STATE

    def test_requester_rates_once(self, maintenance_service, resident_ticket, student_principal, owner_principal):
        close(maintenance_service, owner_principal, resident_ticket)
        feedback = MaintenanceFeedbackRequest(rating=5, comment="Fixed the same day")

        first = maintenance_service.add_feedback(student_principal, resident_ticket.id, feedback)
        second = maintenance_service.add_feedback(student_principal, resident_ticket.id, feedback)

        assert first.data.feedback_rating == 5
        assert first.data.feedback_date is not None
        assert second.error.code == ErrorCode.CONFLICT

    def test_others_cannot_rate(self, maintenance_service, resident_ticket, owner_principal):
        close(maintenance_service, owner_principal, resident_ticket)

        result = maintenance_service.add_feedback(owner_principal, resident_ticket.id, MaintenanceFeedbackRequest(rating=1))

        assert result.error.code == ErrorCode.UNAUTHORIZED


class TestQueries:
    def test_hostel_list_filters(self, maintenance_service, raise_ticket, hostel, owner_principal):
        urgent = raise_ticket(priority=MaintenancePriority.EMERGENCY)
        raise_ticket(bed_number="A")

        result = maintenance_service.list_hostel_requests(
            owner_principal,
            hostel.id,
            MaintenanceFilter(priority=MaintenancePriority.EMERGENCY),
        )

        assert [r.id for r in result.data] == [urgent.id]
        everything = maintenance_service.list_hostel_requests(owner_principal, hostel.id).data
        assert len(everything) == 2

    def test_hostel_list_needs_staff(self, maintenance_service, hostel, other_owner_principal):
        result = maintenance_service.list_hostel_requests(other_owner_principal, hostel.id)

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_own_requests(self, maintenance_service, raise_ticket, checked_in_booking, student_principal):
        mine = raise_ticket(principal=student_principal, bed_number="A")
        raise_ticket()

        result = maintenance_service.list_my_requests(student_principal)

        assert [r.id for r in result.data] == [mine.id]
        assert maintenance_service.get_request(student_principal, mine.id).data.id == mine.id

    def test_stranger_cannot_view(self, maintenance_service, raise_ticket, other_student_principal):
        request = raise_ticket()

        result = maintenance_service.get_request(other_student_principal, request.id)

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_stats(self, maintenance_service, raise_ticket, hostel, owner_principal):
        done = raise_ticket(priority=MaintenancePriority.HIGH)
        raise_ticket(bed_number="A", category=MaintenanceCategory.ELECTRICAL)
        close(maintenance_service, owner_principal, done)

        stats = maintenance_service.get_stats(owner_principal, hostel.id).data

        assert stats.total == 2
        assert stats.by_status == {"completed": 1, "pending": 1}
        assert stats.by_priority == {"high": 1, "medium": 1}
        assert stats.by_category == {"plumbing": 1, "electrical": 1}


class TestDelete:
    def test_admin_delete_returns_bed(
        self, maintenance_service, raise_ticket, bed_service, room, admin_principal, owner_principal
    ):
        request = raise_ticket()

        result = maintenance_service.delete_request(admin_principal, request.id)

        assert result.data == request.id
        assert bed_status(bed_service, room, "B") == BedStatus.AVAILABLE
        assert maintenance_service.get_request(owner_principal, request.id).error.code == ErrorCode.NOT_FOUND

    def test_only_admin_deletes(self, maintenance_service, raise_ticket, owner_principal):
        request = raise_ticket()

        result = maintenance_service.delete_request(owner_principal, request.id)

        assert result.error.code == ErrorCode.UNAUTHORIZED


class TestBedHistory:
    def test_lists_stays_and_tickets(
        self, bed_service, raise_ticket, room, checked_in_booking, student_principal, owner_principal
    ):
        request = raise_ticket(principal=student_principal, bed_number="A")

        result = bed_service.get_bed_history(owner_principal, room.id, "a")

        assert result.data["bed"].bed_number == "A"
        assert [b.id for b in result.data["bookings"]] == [checked_in_booking.id]
        assert [m.id for m in result.data["maintenance"]] == [request.id]

    def test_free_bed_has_empty_history(self, bed_service, room, owner_principal):
        result = bed_service.get_bed_history(owner_principal, room.id, "B")

        assert result.data["bookings"] == []
        assert result.data["maintenance"] == []

    def test_needs_manager(self, bed_service, room, student_principal):
        result = bed_service.get_bed_history(student_principal, room.id, "A")

        assert result.error.code == ErrorCode.UNAUTHORIZED
