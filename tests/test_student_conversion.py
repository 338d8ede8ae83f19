"""
Student records derived at check-in, account linking and the
user-to-hostels view.
"""

import re

import pytest

from hostel_occupancy.core.exceptions import AlreadyConvertedError, ErrorCode
from hostel_occupancy.models.base.enums import StudentSource, StudentStatus
from hostel_occupancy.models.student import Student
from hostel_occupancy.services.student import StudentConversionService
from hostel_occupancy.services.student.student_conversion_service import generate_student_code


@pytest.fixture
def student_service(db):
    return StudentConversionService(db)


@pytest.fixture
def student(db, checked_in_booking):
    return db.get(Student, checked_in_booking.student_id)


@pytest.fixture
def imported_student(db, hostel):
    """A student record that arrived without a booking or account."""
    record = Student(
        student_code="IMP-0001",
        hostel_id=hostel.id,
        name="Tia Student",
        email="TIA@example.com",
        status=StudentStatus.ACTIVE,
        source=StudentSource.IMPORT,
        has_login_access=False,
    )
    db.add(record)
    db.commit()
    return record


def test_student_code_format():
    """Codes are prefix, epoch milliseconds and five random characters."""
    code = generate_student_code()

    assert re.match(r"^STU-\d{13,}-[A-Z0-9]{5}$", code)
    assert generate_student_code("HST").startswith("HST-")


def test_materialize_rejects_converted_booking(student_service, checked_in_booking):
    """A booking converts to at most one student."""
    with pytest.raises(AlreadyConvertedError) as excinfo:
        student_service.materialize(checked_in_booking)

    assert excinfo.value.details["student_id"] == checked_in_booking.student_id


def test_check_out_is_idempotent(student_service, student, owner_principal):
    """Checking out twice keeps the first check-out date."""
    first = student_service.check_out(owner_principal, student.id)
    checked_out_at = first.data.check_out_date

    second = student_service.check_out(owner_principal, student.id)

    assert second.is_success
    assert second.data.status == StudentStatus.CHECKED_OUT
    assert second.data.check_out_date == checked_out_at


def test_guest_cannot_check_out_student(student_service, student, student_principal):
    result = student_service.check_out(student_principal, student.id)

    assert result.error.code == ErrorCode.UNAUTHORIZED


def test_student_survives_booking_deletion(db, booking_service, student_service, student, checked_in_booking, owner_principal):
    """Deleting the booking clears the reference but keeps the residency record."""
    booking_service.check_out(owner_principal, checked_in_booking.id)

    booking_service.delete_booking(owner_principal, checked_in_booking.id)

    kept = student_service.get_student(owner_principal, student.id).data
    assert kept.booking_ref_id is None
    assert kept.status == StudentStatus.CHECKED_OUT


class TestLinkUser:
    """Giving a student record login access."""

    def test_self_link_by_matching_email(self, student_service, imported_student, other_student, other_student_principal):
        """A user may claim a record carrying their email, case-insensitively."""
        result = student_service.link_user(other_student_principal, imported_student.id, other_student.id)

        assert result.is_success
        assert result.data.user_id == other_student.id
        assert result.data.has_login_access is True
        assert imported_student in other_student.student_profiles

    def test_link_is_idempotent(self, student_service, imported_student, other_student, owner_principal):
        """Linking the same account twice keeps a single profile entry."""
        student_service.link_user(owner_principal, imported_student.id, other_student.id)
        student_service.link_user(owner_principal, imported_student.id, other_student.id)

        assert other_student.student_profiles.count(imported_student) == 1

    def test_cannot_claim_foreign_record(self, student_service, imported_student, student_user, student_principal):
        """A different email means the user cannot link themselves."""
        result = student_service.link_user(student_principal, imported_student.id, student_user.id)

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_record_linked_to_another_user(self, student_service, student, other_student, owner_principal):
        """A linked record cannot be moved to a second account."""
        result = student_service.link_user(owner_principal, student.id, other_student.id)

        assert result.error.code == ErrorCode.CONFLICT


class TestQueries:
    """Student listings and the user's hostels."""

    def test_student_reads_own_record(self, student_service, student, student_principal):
        assert student_service.get_student(student_principal, student.id).data.id == student.id

    def test_stranger_cannot_read_record(self, student_service, student, other_student_principal):
        result = student_service.get_student(other_student_principal, student.id)

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_list_students_by_status(self, student_service, student, imported_student, hostel, owner_principal):
        """Owners list their residents, optionally by status."""
        student_service.check_out(owner_principal, imported_student.id)

        active = student_service.list_students(owner_principal, hostel.id, StudentStatus.ACTIVE.value).data
        everyone = student_service.list_students(owner_principal, hostel.id).data

        assert [s.id for s in active] == [student.id]
        assert {s.id for s in everyone} == {student.id, imported_student.id}

    def test_user_hostels(self, student_service, student, student_user, student_principal, hostel):
        """Every profile of the user appears with its hostel."""
        result = student_service.list_user_hostels(student_principal, student_user.id)

        assert result.data == [
            {
                "hostel_id": hostel.id,
                "hostel_name": "Green Leaf Hostel",
                "student_id": student.id,
                "student_code": student.student_code,
                "status": StudentStatus.ACTIVE,
            }
        ]

    def test_user_hostels_of_someone_else(self, student_service, student_user, other_student_principal, admin_principal):
        """Only the user and admins see a user's hostels."""
        refused = student_service.list_user_hostels(other_student_principal, student_user.id)
        allowed = student_service.list_user_hostels(admin_principal, student_user.id)

        assert refused.error.code == ErrorCode.UNAUTHORIZED
        assert allowed.data == []
