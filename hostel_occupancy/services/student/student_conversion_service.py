"""
Student conversion: deriving the residency record from a checked-in booking.
"""

import secrets
import string
import time
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.core.config import settings
from hostel_occupancy.core.exceptions import (
    AlreadyConvertedError,
    AuthorizationError,
    ConflictError,
)
from hostel_occupancy.models.base.enums import StudentSource, StudentStatus, UserRole
from hostel_occupancy.models.booking import Booking
from hostel_occupancy.models.student import Student
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.repositories.student import StudentRepository
from hostel_occupancy.repositories.user import UserRepository
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.permissions import (
    Principal,
    is_hostel_manager,
    require_hostel_manager,
)
from hostel_occupancy.utils.datetime_utils import utc_now

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_student_code(prefix: Optional[str] = None) -> str:
    """``<prefix>-<epoch ms>-<5 random upper-case alphanumerics>``"""
    prefix = prefix or settings.occupancy.STUDENT_CODE_PREFIX
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(5))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


class StudentConversionService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.student_repository = StudentRepository(db_session)
        self.user_repository = UserRepository(db_session)
        self.room_repository = RoomRepository(db_session)
        self.hostel_repository = HostelRepository(db_session)

    # -------------------------------------------------------------------------
    # Unit steps (called inside an open transaction)
    # -------------------------------------------------------------------------

    def materialize(self, booking: Booking, created_by: Optional[str] = None) -> Student:
        """
        Create the Student record for a booking and link it back.

        Raises:
            AlreadyConvertedError: If the booking already has a student
            ConflictError: If no unique student code could be generated
        """
        if booking.student_id:
            raise AlreadyConvertedError(booking.id, booking.student_id)
        existing = self.student_repository.find_by_booking_ref(booking.id)
        if existing is not None:
            raise AlreadyConvertedError(booking.id, existing.id)

        user = booking.user
        room = self.room_repository.find_by_id(booking.room_id) if booking.room_id else None
        attempts = settings.occupancy.STUDENT_CODE_ATTEMPTS

        student = None
        for attempt in range(1, attempts + 1):
            candidate = Student(
                student_code=generate_student_code(),
                hostel_id=booking.hostel_id,
                name=user.name,
                email=user.email,
                phone=user.phone,
                emergency_contact=dict(booking.emergency_contact or {}),
                room_id=booking.room_id,
                room_number=room.room_number if room else None,
                bed_number=booking.bed_number,
                check_in_date=booking.actual_check_in or booking.check_in_date,
                expected_check_out_date=booking.check_out_date,
                status=StudentStatus.ACTIVE,
                user_id=user.id,
                has_login_access=True,
                booking_ref_id=booking.id,
                source=StudentSource.BOOKING_SYSTEM,
                created_by=created_by,
            )
            try:
                with self.transaction_manager.savepoint("student_code"):
                    self.student_repository.create(candidate)
                student = candidate
                break
            except ConflictError:
                if attempt >= attempts:
                    raise
                self._logger.warning(
                    "Student code collision, regenerating",
                    extra={"booking_id": booking.id, "attempt": attempt},
                )

        booking.student_id = student.id
        if student not in user.student_profiles:
            user.student_profiles.append(student)
        self.student_repository.flush()

        self._log_operation(
            "materialize_student",
            student.id,
            {"booking_id": booking.id, "student_code": student.student_code, "hostel_id": student.hostel_id},
        )
        return student

    def check_out_student(self, student: Student, now: Optional[datetime] = None) -> Student:
        """Mark a student checked out. A second call returns the record unchanged."""
        if student.is_checked_out:
            return student
        student.status = StudentStatus.CHECKED_OUT
        student.check_out_date = now or utc_now()
        self.student_repository.save(student)
        self._log_operation("check_out_student", student.id)
        return student

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def check_out(self, principal: Principal, student_id: str) -> ServiceResult[Student]:
        def unit() -> Student:
            student = self.student_repository.get_by_id(student_id)
            require_hostel_manager(principal, self.hostel_repository.get_by_id(student.hostel_id), "check out students")
            return self.check_out_student(student)

        return self._execute("check out student", unit, student_id, message="Student checked out")

    def link_user(self, principal: Principal, student_id: str, user_id: str) -> ServiceResult[Student]:
        """
        Give a student record login access through a user account.

        Hostel managers may link any account; a user may link themselves to a
        record carrying their own email address.
        """

        def unit() -> Student:
            student = self.student_repository.get_by_id(student_id)
            user = self.user_repository.get_by_id(user_id)
            hostel = self.hostel_repository.get_by_id(student.hostel_id)

            self_link = (
                principal.user_id == user.id
                and student.email is not None
                and student.email.lower() == user.email.lower()
            )
            if not (self_link or is_hostel_manager(principal, hostel)):
                raise AuthorizationError("Not authorized to link this student record", action="link_user")
            if student.user_id and student.user_id != user.id:
                raise ConflictError(
                    "Student record is already linked to another user",
                    details={"student_id": student.id},
                )

            student.user_id = user.id
            student.has_login_access = True
            if student not in user.student_profiles:
                user.student_profiles.append(student)
            self.student_repository.save(student)
            self._log_operation("link_student_user", student.id, {"linked_user_id": user.id})
            return student

        return self._execute("link student to user", unit, student_id, message="Student linked to user")

    def get_student(self, principal: Principal, student_id: str) -> ServiceResult[Student]:
        def query() -> Student:
            student = self.student_repository.get_by_id(student_id)
            if student.user_id != principal.user_id:
                require_hostel_manager(
                    principal,
                    self.hostel_repository.get_by_id(student.hostel_id),
                    "view this student",
                )
            return student

        return self._read("get student", query, student_id)

    def list_students(
        self,
        principal: Principal,
        hostel_id: str,
        status: Optional[str] = None,
    ) -> ServiceResult[List[Student]]:
        def query() -> List[Student]:
            hostel = self.hostel_repository.get_by_id(hostel_id)
            require_hostel_manager(principal, hostel, "list students")
            return self.student_repository.list_by_hostel(hostel_id, status)

        return self._read("list students", query, hostel_id)

    def list_user_hostels(self, principal: Principal, user_id: str) -> ServiceResult[List[Dict]]:
        """Hostels a user has a student profile in, one entry per profile."""

        def query() -> List[Dict]:
            if principal.user_id != user_id and principal.role != UserRole.ADMIN:
                raise AuthorizationError("Not authorized to view this user's hostels", action="list_user_hostels")
            user = self.user_repository.get_by_id(user_id)
            entries = []
            for student in user.student_profiles:
                hostel = self.hostel_repository.get_by_id(student.hostel_id)
                entries.append(
                    {
                        "hostel_id": hostel.id,
                        "hostel_name": hostel.name,
                        "student_id": student.id,
                        "student_code": student.student_code,
                        "status": student.status,
                    }
                )
            return entries

        return self._read("list user hostels", query, user_id)
