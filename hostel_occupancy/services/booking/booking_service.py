"""
Booking lifecycle service.

Owns creation, edits and the status transitions that do not move a guest
in or out of a bed. Check-in, check-out and termination touch the room as
well and are delegated to the occupancy coordinator.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.core.config import settings
from hostel_occupancy.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    InvalidTransitionError,
    ValidationError,
)
from hostel_occupancy.models.base.enums import BookingSource, BookingStatus, UserRole, enum_value
from hostel_occupancy.models.booking import (
    PROTECTED_BOOKING_FIELDS,
    USER_EDITABLE_BOOKING_FIELDS,
    Booking,
    compute_can_review,
    ensure_transition,
)
from hostel_occupancy.models.review import Review
from hostel_occupancy.repositories.booking import BookingRepository
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.review import ReviewRepository
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.repositories.student import StudentRepository
from hostel_occupancy.repositories.user import UserRepository
from hostel_occupancy.schemas.booking import (
    BookingCancelRequest,
    BookingCheckOutRequest,
    BookingCreate,
    BookingFilter,
    BookingPaymentUpdate,
    BookingUpdate,
    ReviewCreate,
)
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.permissions import (
    Principal,
    is_hostel_manager,
    require_booking_party,
    require_hostel_manager,
)
from hostel_occupancy.services.common.pricing import compute_financial_snapshot, compute_pending_amount
from hostel_occupancy.services.inventory import bed_operations
from hostel_occupancy.services.inventory.hostel_service import HostelService
from hostel_occupancy.services.occupancy import OccupancyCoordinator
from hostel_occupancy.utils.datetime_utils import DateTimeHelper, utc_now

# Statuses after which the guest has moved in and placement is fixed
PLACED_STATUSES = (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT, BookingStatus.COMPLETED)

# Required columns that an explicit null in an update leaves untouched
REQUIRED_UPDATE_FIELDS = frozenset(
    {"hostel_id", "room_id", "bed_number", "check_in_date", "check_out_date", "user_id", "emergency_contact", "documents"}
)


class BookingService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.booking_repository = BookingRepository(db_session)
        self.hostel_repository = HostelRepository(db_session)
        self.room_repository = RoomRepository(db_session)
        self.user_repository = UserRepository(db_session)
        self.student_repository = StudentRepository(db_session)
        self.review_repository = ReviewRepository(db_session)
        self.hostel_service = HostelService(db_session)
        self.coordinator = OccupancyCoordinator(db_session)

    # -------------------------------------------------------------------------
    # Creation and queries
    # -------------------------------------------------------------------------

    def create_booking(self, principal: Principal, data: BookingCreate) -> ServiceResult[Booking]:
        """
        Create a pending booking for one bed.

        The bed must be free (or held for the booking user) and the user may
        not already hold an active booking in the hostel. The bed itself is
        not marked occupied until check-in.
        """

        def unit() -> Booking:
            min_months = settings.occupancy.MIN_BOOKING_MONTHS
            max_months = settings.occupancy.MAX_BOOKING_MONTHS
            if not min_months <= data.duration_months <= max_months:
                raise ValidationError(
                    f"Duration must be between {min_months} and {max_months} months",
                    field="duration_months",
                )

            hostel = self.hostel_repository.get_by_id(data.hostel_id)
            manager = is_hostel_manager(principal, hostel)
            user = self.user_repository.get_by_id(data.user_id if (manager and data.user_id) else principal.user_id)

            room = self.room_repository.get_by_id(data.room_id)
            if room.hostel_id != hostel.id:
                raise ValidationError("Room does not belong to this hostel", field="room_id")
            bed = bed_operations.find_bed(room, data.bed_number)
            if not bed.is_bookable_by(user.id):
                raise ConflictError(
                    f"Bed {bed.bed_number} is not available for booking",
                    details={"bed_number": bed.bed_number, "status": enum_value(bed.status)},
                )

            existing = self.booking_repository.find_active_for_user_in_hostel(user.id, hostel.id)
            if existing is not None:
                raise ConflictError(
                    "User already has an active booking in this hostel",
                    details={"booking_id": existing.id, "status": enum_value(existing.status)},
                )

            snapshot = compute_financial_snapshot(
                bed.rent_amount,
                data.duration_months,
                data.advance_paid,
                data.deposit_paid_amount,
            )
            check_in = DateTimeHelper.to_naive_utc(data.check_in_date)
            now = utc_now()

            booking = Booking(
                user_id=user.id,
                hostel_id=hostel.id,
                room_id=room.id,
                bed_number=bed.bed_number,
                check_in_date=check_in,
                check_out_date=DateTimeHelper.add_months(check_in, data.duration_months),
                duration_months=data.duration_months,
                rent_amount=snapshot.rent_amount,
                security_deposit=snapshot.security_deposit,
                total_amount=snapshot.total_amount,
                advance_paid=data.advance_paid,
                deposit_paid_amount=data.deposit_paid_amount,
                pending_amount=snapshot.pending_amount,
                status=BookingStatus.PENDING,
                created_by=(data.created_by or BookingSource.ADMIN_BOOKING) if manager else BookingSource.USER_BOOKING,
                emergency_contact=data.emergency_contact.model_dump(mode="json"),
                documents=[document.model_dump(mode="json") for document in data.documents],
                notes=data.notes,
            )
            self.booking_repository.save(booking, now)
            self._log_operation(
                "create_booking",
                booking.id,
                {"user_id": user.id, "room_id": room.id, "bed_number": bed.bed_number},
            )
            return booking

        return self._execute("create booking", unit, data.room_id, message="Booking created successfully")

    def get_booking(self, principal: Principal, booking_id: str) -> ServiceResult[Booking]:
        def query() -> Booking:
            booking = self.booking_repository.get_by_id(booking_id)
            require_booking_party(principal, booking, booking.hostel, "view this booking")
            return booking

        return self._read("get booking", query, booking_id)

    def list_bookings(
        self,
        principal: Principal,
        filters: Optional[BookingFilter] = None,
    ) -> ServiceResult[List[Booking]]:
        """
        List bookings visible to the actor.

        Admins see every booking, owners the bookings of their hostels and
        everyone else only their own.
        """
        filters = filters or BookingFilter()

        def query() -> List[Booking]:
            user_id = None
            hostel_ids = [filters.hostel_id] if filters.hostel_id else None

            if principal.role == UserRole.OWNER:
                owned = [hostel.id for hostel in self.hostel_repository.find_by_owner(principal.user_id)]
                if filters.hostel_id and filters.hostel_id not in owned:
                    raise AuthorizationError("Not authorized to list bookings of this hostel", action="list_bookings")
                hostel_ids = hostel_ids or owned
            elif principal.role != UserRole.ADMIN:
                user_id = principal.user_id

            return self.booking_repository.search(
                user_id=user_id,
                hostel_ids=hostel_ids,
                status=filters.status.value if filters.status else None,
                upcoming=filters.upcoming,
                active=filters.active,
            )

        return self._read("list bookings", query)

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def update_booking(self, principal: Principal, booking_id: str, data: BookingUpdate) -> ServiceResult[Booking]:
        """
        Edit booking fields.

        The guest may change only the emergency contact, documents and
        check-in date, and only while the booking is pending. Hostel managers
        may edit more, but placement and dates are fixed once the guest has
        moved in unless the actor is an admin. Closed bookings are admin-only.
        """

        def unit() -> Booking:
            booking = self.booking_repository.get_by_id(booking_id)
            manager = is_hostel_manager(principal, booking.hostel)
            if not manager and booking.user_id != principal.user_id:
                raise AuthorizationError("Not authorized to edit this booking", action="update_booking")

            changes = {
                key: value
                for key, value in data.model_dump(exclude_unset=True).items()
                if value is not None or key not in REQUIRED_UPDATE_FIELDS
            }
            if not changes:
                raise ValidationError("No fields to update")

            status = BookingStatus(booking.status)
            if booking.is_terminal and not principal.is_admin:
                raise InvalidTransitionError(
                    f"Booking is {status.value} and can no longer be edited",
                    from_status=status.value,
                )
            if not manager:
                if status != BookingStatus.PENDING:
                    raise InvalidTransitionError(
                        "Guests can only edit a booking while it is pending",
                        from_status=status.value,
                    )
                forbidden = sorted(set(changes) - USER_EDITABLE_BOOKING_FIELDS)
                if forbidden:
                    raise AuthorizationError(
                        f"Not allowed to edit: {', '.join(forbidden)}",
                        action="update_booking",
                    )
            if status in PLACED_STATUSES and not principal.is_admin:
                frozen = sorted(set(changes) & PROTECTED_BOOKING_FIELDS)
                if frozen:
                    raise InvalidTransitionError(
                        f"Cannot change {', '.join(frozen)} after check-in",
                        from_status=status.value,
                    )

            self._apply_changes(booking, changes, status)
            self.booking_repository.save(booking)
            self._log_operation("update_booking", booking.id, {"fields": sorted(changes)})
            return booking

        return self._execute("update booking", unit, booking_id, message="Booking updated successfully")

    def _apply_changes(self, booking: Booking, changes: Dict[str, Any], status: BookingStatus) -> None:
        placement = {"hostel_id", "room_id", "bed_number"} & set(changes)
        if placement:
            if status == BookingStatus.CHECKED_IN:
                raise InvalidStateError(
                    "Move a checked-in guest by swapping or vacating the bed",
                    current_state=status.value,
                )
            hostel_id = changes.get("hostel_id", booking.hostel_id)
            room = self.room_repository.get_by_id(changes.get("room_id", booking.room_id))
            if room.hostel_id != self.hostel_repository.get_by_id(hostel_id).id:
                raise ValidationError("Room does not belong to this hostel", field="room_id")
            bed = bed_operations.find_bed(room, changes.get("bed_number", booking.bed_number))
            moved = room.id != booking.room_id or bed.bed_number != booking.bed_number
            if moved and not bed.is_bookable_by(booking.user_id):
                raise ConflictError(
                    f"Bed {bed.bed_number} is not available for booking",
                    details={"bed_number": bed.bed_number, "status": enum_value(bed.status)},
                )
            booking.hostel_id = hostel_id
            booking.room_id = room.id
            booking.bed_number = bed.bed_number

        if "user_id" in changes:
            booking.user_id = self.user_repository.get_by_id(changes["user_id"]).id

        if "check_in_date" in changes:
            booking.check_in_date = DateTimeHelper.to_naive_utc(changes["check_in_date"])
            if "check_out_date" not in changes:
                booking.check_out_date = DateTimeHelper.add_months(booking.check_in_date, booking.duration_months)
        if "check_out_date" in changes:
            booking.check_out_date = DateTimeHelper.to_naive_utc(changes["check_out_date"])
        if booking.check_out_date <= booking.check_in_date:
            raise ValidationError("Check-out date must be after check-in date", field="check_out_date")

        if "emergency_contact" in changes:
            booking.emergency_contact = dict(changes["emergency_contact"])
        if "documents" in changes:
            booking.documents = [dict(document) for document in changes["documents"]]
        if "notes" in changes:
            booking.notes = changes["notes"]

    # -------------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------------

    def confirm_booking(self, principal: Principal, booking_id: str) -> ServiceResult[Booking]:
        def unit() -> Booking:
            booking = self.booking_repository.get_by_id(booking_id)
            require_hostel_manager(principal, booking.hostel, "confirm bookings")
            ensure_transition(booking, BookingStatus.CONFIRMED)

            now = utc_now()
            booking.status = BookingStatus.CONFIRMED
            booking.confirmed_at = now
            booking.confirmed_by = principal.user_id
            self.booking_repository.save(booking, now)
            self._log_operation("confirm_booking", booking.id)
            return booking

        return self._execute("confirm booking", unit, booking_id, message="Booking confirmed")

    def cancel_booking(
        self,
        principal: Principal,
        booking_id: str,
        data: Optional[BookingCancelRequest] = None,
    ) -> ServiceResult[Booking]:
        """Cancel a pending or confirmed booking, releasing a bed held for its user."""
        data = data or BookingCancelRequest()

        def unit() -> Booking:
            booking = self.booking_repository.get_by_id(booking_id)
            require_booking_party(principal, booking, booking.hostel, "cancel this booking")
            ensure_transition(booking, BookingStatus.CANCELLED)

            now = utc_now()
            self._release_hold(booking, now)
            booking.status = BookingStatus.CANCELLED
            booking.cancelled_at = now
            booking.cancelled_by = principal.user_id
            booking.cancellation_reason = data.reason
            self.booking_repository.save(booking, now)
            self._log_operation("cancel_booking", booking.id, {"reason": data.reason})
            return booking

        return self._execute(
            "cancel booking",
            unit,
            booking_id,
            message="Booking cancelled",
            attempts=self.retry_attempts,
        )

    def mark_no_show(self, principal: Principal, booking_id: str) -> ServiceResult[Booking]:
        def unit() -> Booking:
            booking = self.booking_repository.get_by_id(booking_id)
            require_hostel_manager(principal, booking.hostel, "mark no-shows")
            ensure_transition(booking, BookingStatus.NO_SHOW)

            now = utc_now()
            self._release_hold(booking, now)
            booking.status = BookingStatus.NO_SHOW
            self.booking_repository.save(booking, now)
            self._log_operation("mark_no_show", booking.id)
            return booking

        return self._execute(
            "mark booking no-show",
            unit,
            booking_id,
            message="Booking marked as no-show",
            attempts=self.retry_attempts,
        )

    def complete_booking(self, principal: Principal, booking_id: str) -> ServiceResult[Booking]:
        def unit() -> Booking:
            booking = self.booking_repository.get_by_id(booking_id)
            require_hostel_manager(principal, booking.hostel, "complete bookings")
            ensure_transition(booking, BookingStatus.COMPLETED)

            booking.status = BookingStatus.COMPLETED
            self.booking_repository.save(booking)
            self._log_operation("complete_booking", booking.id)
            return booking

        return self._execute("complete booking", unit, booking_id, message="Booking completed")

    def check_in(self, principal: Principal, booking_id: str) -> ServiceResult[Dict[str, Any]]:
        return self.coordinator.check_in(principal, booking_id)

    def check_out(
        self,
        principal: Principal,
        booking_id: str,
        data: Optional[BookingCheckOutRequest] = None,
    ) -> ServiceResult[Dict[str, Any]]:
        return self.coordinator.check_out(principal, booking_id, data)

    def terminate(self, principal: Principal, booking_id: str, reason: str) -> ServiceResult[Dict[str, Any]]:
        return self.coordinator.terminate(principal, booking_id, reason)

    def delete_booking(self, principal: Principal, booking_id: str) -> ServiceResult[Dict[str, str]]:
        """
        Hard-delete a booking that is not checked in.

        A bed held for the booking user is released first. Its student record
        survives with the booking reference cleared.
        """

        def unit() -> Dict[str, str]:
            booking = self.booking_repository.get_by_id(booking_id)
            require_hostel_manager(principal, booking.hostel, "delete bookings")
            if booking.status == BookingStatus.CHECKED_IN:
                raise InvalidStateError(
                    "Cannot delete a checked-in booking; check the guest out first",
                    current_state=BookingStatus.CHECKED_IN.value,
                )

            now = utc_now()
            self._release_hold(booking, now)
            student = self.student_repository.find_by_booking_ref(booking.id)
            if student is not None:
                student.booking_ref_id = None
                self.student_repository.save(student)

            hostel_id = booking.hostel_id
            reviewed = booking.review_submitted
            self.booking_repository.delete(booking)
            if reviewed:
                self.hostel_service.recompute_rating(hostel_id)

            self._log_operation("delete_booking", booking_id, {"hostel_id": hostel_id})
            return {"id": booking_id}

        return self._execute(
            "delete booking",
            unit,
            booking_id,
            message="Booking deleted",
            attempts=self.retry_attempts,
        )

    # -------------------------------------------------------------------------
    # Payments and reviews
    # -------------------------------------------------------------------------

    def record_booking_payment(
        self,
        principal: Principal,
        booking_id: str,
        data: BookingPaymentUpdate,
    ) -> ServiceResult[Booking]:
        """Add advance and deposit payments and recompute the pending amount."""

        def unit() -> Booking:
            booking = self.booking_repository.get_by_id(booking_id)
            require_hostel_manager(principal, booking.hostel, "record booking payments")
            if booking.status in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
                raise InvalidStateError(
                    "Cannot record payments on a booking that never started",
                    current_state=enum_value(booking.status),
                )
            if not data.advance_amount and not data.deposit_amount:
                raise ValidationError("Payment amount must be greater than zero", field="advance_amount")

            booking.advance_paid = booking.advance_paid + data.advance_amount
            booking.deposit_paid_amount = booking.deposit_paid_amount + data.deposit_amount
            booking.pending_amount = compute_pending_amount(
                booking.total_amount,
                booking.security_deposit,
                booking.advance_paid,
                booking.deposit_paid_amount,
            )
            self.booking_repository.save(booking)
            self._log_operation(
                "record_booking_payment",
                booking.id,
                {"pending_amount": str(booking.pending_amount)},
            )
            return booking

        return self._execute("record booking payment", unit, booking_id, message="Payment recorded")

    def submit_review(self, principal: Principal, booking_id: str, data: ReviewCreate) -> ServiceResult[Review]:
        """
        Review a finished stay and refresh the hostel's rating aggregate.
        """

        def unit() -> Review:
            if not 1 <= data.rating <= 5:
                raise ValidationError("Rating must be between 1 and 5", field="rating")

            booking = self.booking_repository.get_by_id(booking_id)
            if booking.user_id != principal.user_id:
                raise AuthorizationError("Only the guest can review this booking", action="submit_review")
            if booking.review_submitted or self.review_repository.find_by_booking(booking.id) is not None:
                raise ConflictError("A review was already submitted for this booking", details={"booking_id": booking.id})

            now = utc_now()
            if not compute_can_review(booking, now):
                raise InvalidStateError(
                    "Booking cannot be reviewed until the stay is over",
                    current_state=enum_value(booking.status),
                )

            review = Review(
                booking_id=booking.id,
                user_id=booking.user_id,
                hostel_id=booking.hostel_id,
                rating=data.rating,
                comment=data.comment,
            )
            self.review_repository.create(review)
            booking.review_submitted = True
            self.booking_repository.save(booking, now)
            self.hostel_service.recompute_rating(booking.hostel_id)

            self._log_operation("submit_review", booking.id, {"rating": data.rating})
            return review

        return self._execute("submit review", unit, booking_id, message="Review submitted")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _release_hold(self, booking: Booking, now: datetime) -> None:
        if booking.room_id is None:
            return
        room = self.room_repository.get_for_update(booking.room_id)
        if bed_operations.release_hold_for(room, booking.bed_number, booking.user_id, now):
            self.room_repository.save(room, now)
            self._logger.info(
                "Released bed hold",
                extra={"booking_id": booking.id, "room_id": room.id, "bed_number": booking.bed_number},
            )
