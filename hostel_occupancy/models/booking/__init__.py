from hostel_occupancy.models.booking.booking import (
    ACTIVE_BOOKING_STATUSES,
    BOOKING_TRANSITIONS,
    PROTECTED_BOOKING_FIELDS,
    TERMINAL_BOOKING_STATUSES,
    USER_EDITABLE_BOOKING_FIELDS,
    Booking,
    compute_can_review,
    ensure_transition,
)

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
