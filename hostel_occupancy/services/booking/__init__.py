"""
Booking service layer.

Provides business logic for:
- Booking creation, edits and search
- Confirmation, cancellation, no-show and completion
- Advance and deposit payments
- Reviews and the hostel rating aggregate
"""

from hostel_occupancy.services.booking.booking_service import BookingService

__all__ = ["BookingService"]
