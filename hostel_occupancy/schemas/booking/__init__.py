from hostel_occupancy.schemas.booking.booking_base import (
    BookingCancelRequest,
    BookingCheckOutRequest,
    BookingCreate,
    BookingDocument,
    BookingFilter,
    BookingPaymentUpdate,
    BookingResponse,
    BookingTerminateRequest,
    BookingUpdate,
    EmergencyContact,
    RefundDetails,
    ReviewCreate,
    ReviewResponse,
)

__all__ = [
    "BookingCancelRequest",
    "BookingCheckOutRequest",
    "BookingCreate",
    "BookingDocument",
    "BookingFilter",
    "BookingPaymentUpdate",
    "BookingResponse",
    "BookingTerminateRequest",
    "BookingUpdate",
    "EmergencyContact",
    "RefundDetails",
    "ReviewCreate",
    "ReviewResponse",
]
