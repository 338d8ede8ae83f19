"""
Database enums.

Values are the wire values exposed by the API and stored in string columns.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    STUDENT = "student"
    OWNER = "owner"
    ADMIN = "admin"
    STAFF = "staff"


class RoomStatus(str, enum.Enum):
    """Derived room availability status."""
    AVAILABLE = "available"
    FULLY_OCCUPIED = "fully_occupied"
    MAINTENANCE = "maintenance"


class RoomType(str, enum.Enum):
    """Room type categorization."""
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    FOUR_SHARING = "four_sharing"
    DORMITORY = "dormitory"


class BedStatus(str, enum.Enum):
    """Bed availability status."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle status."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checkedIn"
    CHECKED_OUT = "checkedOut"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "noShow"
    TERMINATED = "terminated"


class BookingSource(str, enum.Enum):
    """Who created a booking."""
    USER_BOOKING = "user-booking"
    ADMIN_BOOKING = "admin-booking"
    WALK_IN = "walk-in"


class StudentStatus(str, enum.Enum):
    """Student lifecycle status."""
    ACTIVE = "active"
    CHECKED_OUT = "checked-out"
    SUSPENDED = "suspended"
    TRANSFERRED = "transferred"


class StudentSource(str, enum.Enum):
    """How a student record came to exist."""
    DIRECT_ADMIN = "direct-admin"
    BOOKING_SYSTEM = "booking-system"
    IMPORT = "import"


class PaymentStatus(str, enum.Enum):
    """Derived monthly bill status."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, enum.Enum):
    """Payment method types."""
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CARD = "card"


class MaintenanceStatus(str, enum.Enum):
    """Maintenance ticket status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MaintenanceCategory(str, enum.Enum):
    """Maintenance work categorization."""
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    CARPENTRY = "carpentry"
    CLEANING = "cleaning"
    FURNITURE = "furniture"
    OTHER = "other"


class MaintenancePriority(str, enum.Enum):
    """Maintenance ticket urgency."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


def enum_value(value):
    """Plain string value of an enum member or an already-loaded column value."""
    return value.value if isinstance(value, enum.Enum) else value
