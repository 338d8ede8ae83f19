"""
Occupancy coordinator.

Runs the transitions that touch a bed, its booking and the derived student
record together. Each public operation is one atomic unit: the room is
locked and version-checked, and any failure rolls back every step already
flushed in the unit. A unit that loses a room-version race is retried from
scratch.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from hostel_occupancy.core.exceptions import (
    AlreadyConvertedError,
    InvalidStateError,
    ValidationError,
)
from hostel_occupancy.models.base.enums import BookingStatus, enum_value
from hostel_occupancy.models.booking import Booking, ensure_transition
from hostel_occupancy.models.room import Bed, Room
from hostel_occupancy.models.student import Student
from hostel_occupancy.repositories.booking import BookingRepository
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.repositories.student import StudentRepository
from hostel_occupancy.repositories.user import UserRepository
from hostel_occupancy.schemas.booking import BookingCheckOutRequest
from hostel_occupancy.schemas.room import BedAssignmentRequest, BedSwapRequest, normalize_bed_number
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.pricing import compute_refund
from hostel_occupancy.services.common.permissions import Principal, require_hostel_manager
from hostel_occupancy.services.inventory import bed_operations
from hostel_occupancy.services.student.student_conversion_service import StudentConversionService
from hostel_occupancy.utils.datetime_utils import DateTimeHelper, utc_now


class OccupancyCoordinator(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.room_repository = RoomRepository(db_session)
        self.booking_repository = BookingRepository(db_session)
        self.student_repository = StudentRepository(db_session)
        self.user_repository = UserRepository(db_session)
        self.student_service = StudentConversionService(db_session)

    # -------------------------------------------------------------------------
    # Bed-level operations
    # -------------------------------------------------------------------------

    def assign_bed(
        self,
        principal: Principal,
        room_id: str,
        bed_number: str,
        data: BedAssignmentRequest,
    ) -> ServiceResult[Dict[str, Any]]:
        """
        Put an occupant in a bed.

        With ``booking_id`` the booking must target this bed and is moved to
        checked-in together with the bed. Otherwise the direct student
        details are recorded on the bed (walk-in).
        """

        def unit() -> Dict[str, Any]:
            room = self._lock_room(principal, room_id, "assign beds")
            now = utc_now()
            booking = None

            if data.booking_id:
                booking = self.booking_repository.get_by_id(data.booking_id)
                self._ensure_booking_targets(booking, room, bed_number)
                ensure_transition(booking, BookingStatus.CHECKED_IN)
                occupant_id = booking.user_id
                snapshot = self._user_snapshot(booking, now)
            else:
                occupant_id = None
                if data.user_id:
                    occupant_id = self.user_repository.get_by_id(data.user_id).id
                snapshot = {
                    "student_code": data.student_code,
                    "student_name": data.student_name,
                    "student_phone": data.student_phone,
                    "student_email": data.student_email,
                    "check_in_date": DateTimeHelper.to_naive_utc(data.check_in_date) or now,
                }

            bed = self._occupy(room, bed_number, occupant_id, snapshot, booking, now)
            self._log_operation(
                "assign_bed",
                room.id,
                {"bed_number": bed.bed_number, "booking_id": booking.id if booking else None},
            )
            return {"bed": bed, "booking": booking}

        return self._execute(
            "assign bed",
            unit,
            f"{room_id}/{bed_number}",
            message="Bed assigned successfully",
            attempts=self.retry_attempts,
        )

    def vacate_bed(self, principal: Principal, room_id: str, bed_number: str) -> ServiceResult[Dict[str, Any]]:
        """
        Free an occupied bed and return the previous occupant.

        A checked-in booking on the bed is checked out with it, and so is its
        student record.
        """

        def unit() -> Dict[str, Any]:
            room = self._lock_room(principal, room_id, "vacate beds")
            now = utc_now()

            bed = bed_operations.find_bed(room, bed_number)
            booking = self.booking_repository.find_checked_in_for_bed(room.id, bed.bed_number)
            previous = self._release(room, bed.bed_number, now)

            student = None
            if booking is not None:
                booking.status = BookingStatus.CHECKED_OUT
                booking.actual_check_out = now
                self.booking_repository.save(booking, now)
                student = self._check_out_linked_student(booking, now)

            self._log_operation(
                "vacate_bed",
                room.id,
                {"bed_number": bed.bed_number, "booking_id": booking.id if booking else None},
            )
            return {"bed": bed, "previous_occupant": previous, "booking": booking, "student": student}

        return self._execute(
            "vacate bed",
            unit,
            f"{room_id}/{bed_number}",
            message="Bed vacated successfully",
            attempts=self.retry_attempts,
        )

    def swap_beds(self, principal: Principal, room_id: str, data: BedSwapRequest) -> ServiceResult[Dict[str, Any]]:
        """
        Exchange the occupancy of two beds in one room.

        Checked-in bookings on either bed, and their students' bed numbers,
        follow their occupant.
        """

        def unit() -> Dict[str, Any]:
            room = self._lock_room(principal, room_id, "swap beds")
            now = utc_now()

            number_a = normalize_bed_number(data.bed_number_a)
            number_b = normalize_bed_number(data.bed_number_b)
            booking_a = self.booking_repository.find_checked_in_for_bed(room.id, number_a)
            booking_b = self.booking_repository.find_checked_in_for_bed(room.id, number_b)

            bed_a, bed_b = bed_operations.swap_beds(room, number_a, number_b, now)
            self.room_repository.save(room, now)

            for booking, target in ((booking_a, bed_b.bed_number), (booking_b, bed_a.bed_number)):
                if booking is None:
                    continue
                booking.bed_number = target
                self.booking_repository.save(booking, now)
                if booking.student_id:
                    student = self.student_repository.find_by_id(booking.student_id)
                    if student is not None:
                        student.bed_number = target
                        self.student_repository.save(student)

            self._log_operation(
                "swap_beds",
                room.id,
                {"bed_number_a": bed_a.bed_number, "bed_number_b": bed_b.bed_number},
            )
            return {"bed_a": bed_a, "bed_b": bed_b}

        return self._execute(
            "swap beds",
            unit,
            room_id,
            message="Beds swapped successfully",
            attempts=self.retry_attempts,
        )

    # -------------------------------------------------------------------------
    # Booking-level operations
    # -------------------------------------------------------------------------

    def check_in(self, principal: Principal, booking_id: str) -> ServiceResult[Dict[str, Any]]:
        """
        Occupy the booked bed, move the booking to checked-in and create the
        student record.

        If the booking was already converted, the check-in still succeeds and
        the reason is reported in ``metadata["conversion_error"]``.
        """

        def unit() -> ServiceResult[Dict[str, Any]]:
            booking, room = self._load_booking_room(principal, booking_id, "check in bookings")
            ensure_transition(booking, BookingStatus.CHECKED_IN)
            now = utc_now()

            bed = self._occupy(room, booking.bed_number, booking.user_id, self._user_snapshot(booking, now), booking, now)

            student: Optional[Student] = None
            conversion_error: Optional[AlreadyConvertedError] = None
            try:
                with self.transaction_manager.savepoint("student_conversion"):
                    student = self.student_service.materialize(booking, created_by=principal.user_id)
            except AlreadyConvertedError as e:
                conversion_error = e
                self._logger.warning(
                    "Check-in proceeded without student conversion",
                    extra={"booking_id": booking.id, "reason": e.message},
                )

            if student is not None:
                bed.student_code = student.student_code
                self.room_repository.save(room, now)

            self._log_operation(
                "check_in",
                booking.id,
                {"room_id": room.id, "bed_number": bed.bed_number, "student_id": booking.student_id},
            )

            data = {"booking": booking, "bed": bed, "student": student}
            if conversion_error is not None:
                return ServiceResult.success(
                    data,
                    message=f"Checked in; student record not created: {conversion_error.message}",
                    metadata={"conversion_error": conversion_error.to_dict()["error"]},
                )
            return ServiceResult.success(data, message="Checked in successfully")

        return self._execute("check in booking", unit, booking_id, attempts=self.retry_attempts)

    def check_out(
        self,
        principal: Principal,
        booking_id: str,
        data: Optional[BookingCheckOutRequest] = None,
    ) -> ServiceResult[Dict[str, Any]]:
        """
        Free the bed, move the booking to checked-out and check the student
        out. The refund is computed and recorded, never paid out here.
        """
        data = data or BookingCheckOutRequest()

        def unit() -> Dict[str, Any]:
            booking, room = self._load_booking_room(principal, booking_id, "check out bookings")
            ensure_transition(booking, BookingStatus.CHECKED_OUT)
            now = utc_now()

            previous = self._release(room, booking.bed_number, now)
            refund = compute_refund(booking.security_deposit, data.damages, data.refund_amount)

            booking.status = BookingStatus.CHECKED_OUT
            booking.actual_check_out = now
            booking.damages = refund.damages
            booking.refund_amount = refund.refund_amount
            if data.notes:
                booking.check_out_notes = data.notes
            self.booking_repository.save(booking, now)
            student = self._check_out_linked_student(booking, now)

            self._log_operation(
                "check_out",
                booking.id,
                {"room_id": room.id, "bed_number": booking.bed_number, "refund_amount": str(refund.refund_amount)},
            )
            return {"booking": booking, "student": student, "refund": refund.to_dict(), "previous_occupant": previous}

        return self._execute(
            "check out booking",
            unit,
            booking_id,
            message="Checked out successfully",
            attempts=self.retry_attempts,
        )

    def terminate(self, principal: Principal, booking_id: str, reason: str) -> ServiceResult[Dict[str, Any]]:
        """End a checked-in stay early: frees the bed and checks the student out."""

        def unit() -> Dict[str, Any]:
            booking, room = self._load_booking_room(principal, booking_id, "terminate bookings")
            ensure_transition(booking, BookingStatus.TERMINATED)
            now = utc_now()

            previous = self._release(room, booking.bed_number, now)
            booking.status = BookingStatus.TERMINATED
            booking.terminated_at = now
            booking.termination_reason = reason
            booking.actual_check_out = now
            self.booking_repository.save(booking, now)
            student = self._check_out_linked_student(booking, now)

            self._log_operation("terminate", booking.id, {"room_id": room.id, "reason": reason})
            return {"booking": booking, "student": student, "previous_occupant": previous}

        return self._execute(
            "terminate booking",
            unit,
            booking_id,
            message="Booking terminated",
            attempts=self.retry_attempts,
        )

    # -------------------------------------------------------------------------
    # Unit steps
    # -------------------------------------------------------------------------

    def _lock_room(self, principal: Principal, room_id: str, action: str) -> Room:
        room = self.room_repository.get_for_update(room_id)
        require_hostel_manager(principal, room.hostel, action)
        return room

    def _load_booking_room(self, principal: Principal, booking_id: str, action: str) -> Tuple[Booking, Room]:
        booking = self.booking_repository.get_by_id(booking_id)
        require_hostel_manager(principal, booking.hostel, action)
        if booking.room_id is None:
            raise InvalidStateError("Booking no longer references a room", current_state=enum_value(booking.status))
        return booking, self.room_repository.get_for_update(booking.room_id)

    @staticmethod
    def _ensure_booking_targets(booking: Booking, room: Room, bed_number: str) -> None:
        if booking.room_id != room.id or booking.bed_number != normalize_bed_number(bed_number):
            raise ValidationError(
                f"Booking {booking.id} is for a different bed",
                field="booking_id",
            )

    @staticmethod
    def _user_snapshot(booking: Booking, now: datetime) -> Dict[str, Any]:
        user = booking.user
        return {
            "student_code": None,
            "student_name": user.name,
            "student_phone": user.phone,
            "student_email": user.email,
            "check_in_date": now,
        }

    def _occupy(
        self,
        room: Room,
        bed_number: str,
        occupant_id: Optional[str],
        snapshot: Dict[str, Any],
        booking: Optional[Booking],
        now: datetime,
    ) -> Bed:
        bed = bed_operations.occupy_bed(room, bed_number, occupant_id, snapshot, now)
        self.room_repository.save(room, now)
        if booking is not None:
            booking.status = BookingStatus.CHECKED_IN
            booking.actual_check_in = now
            self.booking_repository.save(booking, now)
        return bed

    def _release(self, room: Room, bed_number: str, now: datetime) -> Dict[str, Any]:
        previous = bed_operations.release_bed(room, bed_number, now)
        self.room_repository.save(room, now)
        return previous

    def _check_out_linked_student(self, booking: Booking, now: datetime) -> Optional[Student]:
        if not booking.student_id:
            return None
        student = self.student_repository.find_by_id(booking.student_id)
        if student is None:
            return None
        return self.student_service.check_out_student(student, now)
