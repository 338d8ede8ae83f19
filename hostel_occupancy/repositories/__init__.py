"""Data access layer."""

from hostel_occupancy.repositories.base import BaseRepository
from hostel_occupancy.repositories.booking import BookingRepository
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.maintenance import MaintenanceRepository
from hostel_occupancy.repositories.payment import PaymentRepository
from hostel_occupancy.repositories.review import ReviewRepository
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.repositories.student import StudentRepository
from hostel_occupancy.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "HostelRepository",
    "MaintenanceRepository",
    "PaymentRepository",
    "ReviewRepository",
    "RoomRepository",
    "StudentRepository",
    "UserRepository",
]
