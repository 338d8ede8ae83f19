"""
Booking model with lifecycle tables and the derived review flag.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_occupancy.core.exceptions import InvalidTransitionError
from hostel_occupancy.models.base.base_model import TimestampModel
from hostel_occupancy.models.base.enums import BookingSource, BookingStatus, enum_value

__all__ = [
    "Booking",
    "BOOKING_TRANSITIONS",
    "ACTIVE_BOOKING_STATUSES",
    "TERMINAL_BOOKING_STATUSES",
    "PROTECTED_BOOKING_FIELDS",
    "USER_EDITABLE_BOOKING_FIELDS",
    "compute_can_review",
    "ensure_transition",
]


BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}
    ),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT, BookingStatus.TERMINATED}),
    BookingStatus.CHECKED_OUT: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
    BookingStatus.TERMINATED: frozenset(),
}

ACTIVE_BOOKING_STATUSES = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.CHECKED_IN,
)

TERMINAL_BOOKING_STATUSES = (
    BookingStatus.CHECKED_OUT,
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
    BookingStatus.TERMINATED,
)

# Frozen once the guest has moved in, except for admins
PROTECTED_BOOKING_FIELDS = frozenset(
    {"hostel_id", "room_id", "bed_number", "check_in_date", "check_out_date", "user_id"}
)

USER_EDITABLE_BOOKING_FIELDS = frozenset({"emergency_contact", "documents", "check_in_date"})

REVIEWABLE_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CHECKED_OUT)


class Booking(TimestampModel):
    """
    A user's booking of one bed in one room.

    The financial snapshot is fixed at creation; only recorded payments move
    ``pending_amount``.
    """

    __tablename__ = "bookings"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hostel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("rooms.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    bed_number: Mapped[str] = mapped_column(String(20), nullable=False)

    # Weak back-reference, set by student conversion
    student_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    # Dates
    check_in_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    check_out_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    actual_check_in: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    actual_check_out: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Financial snapshot
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    advance_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    deposit_paid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    pending_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Lifecycle
    status: Mapped[BookingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    created_by: Mapped[BookingSource] = mapped_column(
        String(20),
        nullable=False,
        default=BookingSource.USER_BOOKING,
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    confirmed_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    cancelled_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    terminated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    termination_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Check-out settlement
    damages: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    refund_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    check_out_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Guest details
    emergency_contact: Mapped[Dict] = mapped_column(JSON, nullable=False)
    documents: Mapped[List[Dict]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Reviews
    review_submitted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_review: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped["User"] = relationship("User")
    hostel: Mapped["Hostel"] = relationship("Hostel")
    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_BOOKING_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BOOKING_STATUSES

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in BOOKING_TRANSITIONS.get(BookingStatus(self.status), frozenset())

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, status={self.status}, bed={self.room_id}/{self.bed_number})>"


def compute_can_review(booking: Booking, now: datetime) -> bool:
    """Reviewable once the stay is over and no review exists yet."""
    if booking.status not in REVIEWABLE_STATUSES or booking.review_submitted:
        return False
    stay_over = booking.actual_check_out is not None or (
        booking.check_out_date is not None and booking.check_out_date < now
    )
    return bool(stay_over)


def ensure_transition(booking: Booking, target: BookingStatus) -> None:
    """Raise unless the lifecycle allows ``booking`` to move to ``target``."""
    if not booking.can_transition_to(target):
        current = enum_value(booking.status)
        raise InvalidTransitionError(
            f"Cannot change booking status from '{current}' to '{target.value}'",
            from_status=current,
            to_status=target.value,
        )
