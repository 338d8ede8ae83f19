"""
Student residency record.

Derived from a booking at check-in and kept after the booking is gone.
``student_code`` is unique per hostel, not globally.
"""

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hostel_occupancy.models.base.base_model import TimestampModel
from hostel_occupancy.models.base.enums import StudentSource, StudentStatus

__all__ = ["Student"]


class Student(TimestampModel):
    """Resident of a hostel."""

    __tablename__ = "students"
    __table_args__ = (
        UniqueConstraint("student_code", "hostel_id", name="uq_student_code_hostel"),
    )

    student_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    hostel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Identity copied from the booking's user
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    emergency_contact: Mapped[Optional[Dict]] = mapped_column(JSON, nullable=True)

    # Placement
    room_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("rooms.id", ondelete="SET NULL"),
        nullable=True,
    )
    room_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    bed_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    check_in_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expected_check_out_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    check_out_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    status: Mapped[StudentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=StudentStatus.ACTIVE,
        index=True,
    )

    # Login link
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    has_login_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Provenance
    booking_ref_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("bookings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    source: Mapped[StudentSource] = mapped_column(
        String(20),
        nullable=False,
        default=StudentSource.BOOKING_SYSTEM,
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    @property
    def is_checked_out(self) -> bool:
        return self.status == StudentStatus.CHECKED_OUT

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, code={self.student_code}, status={self.status})>"
