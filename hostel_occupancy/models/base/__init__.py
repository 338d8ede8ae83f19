"""Base model classes and enums."""

from hostel_occupancy.models.base.base_model import Base, BaseModel, TimestampModel
from hostel_occupancy.models.base.enums import (
    BedStatus,
    BookingSource,
    BookingStatus,
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
    PaymentMethod,
    PaymentStatus,
    RoomStatus,
    RoomType,
    StudentSource,
    StudentStatus,
    UserRole,
    enum_value,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "BedStatus",
    "BookingSource",
    "BookingStatus",
    "MaintenanceCategory",
    "MaintenancePriority",
    "MaintenanceStatus",
    "PaymentMethod",
    "PaymentStatus",
    "RoomStatus",
    "RoomType",
    "StudentSource",
    "StudentStatus",
    "UserRole",
    "enum_value",
]
