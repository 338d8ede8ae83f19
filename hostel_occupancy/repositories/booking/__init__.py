from hostel_occupancy.repositories.booking.booking_repository import BookingRepository

__all__ = ["BookingRepository"]
