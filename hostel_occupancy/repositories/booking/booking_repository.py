"""Booking repository."""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.models.base.enums import BookingStatus
from hostel_occupancy.models.booking import ACTIVE_BOOKING_STATUSES, Booking, compute_can_review
from hostel_occupancy.repositories.base import BaseRepository
from hostel_occupancy.utils.datetime_utils import utc_now


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(Booking, db)

    def save(self, booking: Booking, now: Optional[datetime] = None) -> Booking:
        """Persist a booking, re-deriving ``can_review``."""
        booking.can_review = compute_can_review(booking, now or utc_now())
        self.db.add(booking)
        self.flush()
        return booking

    def find_active_for_user_in_hostel(self, user_id: str, hostel_id: str) -> Optional[Booking]:
        return (
            self.db.query(Booking)
            .filter(
                Booking.user_id == user_id,
                Booking.hostel_id == hostel_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            )
            .first()
        )

    def find_checked_in_for_bed(self, room_id: str, bed_number: str) -> Optional[Booking]:
        return (
            self.db.query(Booking)
            .filter(
                Booking.room_id == room_id,
                Booking.bed_number == bed_number,
                Booking.status == BookingStatus.CHECKED_IN,
            )
            .first()
        )

    def search(
        self,
        user_id: Optional[str] = None,
        hostel_ids: Optional[Iterable[str]] = None,
        status: Optional[str] = None,
        upcoming: bool = False,
        active: bool = False,
        now: Optional[datetime] = None,
    ) -> List[Booking]:
        """
        Filter bookings.

        ``upcoming`` keeps future check-ins that are still pending or
        confirmed; ``active`` keeps pending, confirmed and checked-in ones.
        """
        now = now or utc_now()
        query = self.db.query(Booking)

        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        if hostel_ids is not None:
            query = query.filter(Booking.hostel_id.in_(list(hostel_ids)))
        if status:
            query = query.filter(Booking.status == status)
        if upcoming:
            query = query.filter(
                Booking.check_in_date >= now,
                Booking.status.in_((BookingStatus.PENDING, BookingStatus.CONFIRMED)),
            )
        if active:
            query = query.filter(Booking.status.in_(ACTIVE_BOOKING_STATUSES))

        return query.order_by(Booking.created_at.desc()).all()

    def list_billable(self, hostel_id: str) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(
                Booking.hostel_id == hostel_id,
                Booking.status.in_((BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN)),
            )
            .all()
        )

    def list_for_bed(self, room_id: str, bed_number: str) -> List[Booking]:
        """Every booking ever placed on one bed, latest stay first."""
        return (
            self.db.query(Booking)
            .filter(Booking.room_id == room_id, Booking.bed_number == bed_number)
            .order_by(Booking.check_in_date.desc())
            .all()
        )
