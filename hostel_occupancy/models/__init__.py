"""
ORM models.

Importing this package registers every mapper with the shared metadata.
"""

from hostel_occupancy.models.base import Base
from hostel_occupancy.models.booking import Booking
from hostel_occupancy.models.hostel import Hostel
from hostel_occupancy.models.maintenance import MaintenanceRequest
from hostel_occupancy.models.payment import Payment
from hostel_occupancy.models.review import Review
from hostel_occupancy.models.room import Bed, Room
from hostel_occupancy.models.student import Student
from hostel_occupancy.models.user import User

__all__ = [
    "Base",
    "Bed",
    "Booking",
    "Hostel",
    "MaintenanceRequest",
    "Payment",
    "Review",
    "Room",
    "Student",
    "User",
]
