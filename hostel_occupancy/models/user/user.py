"""
User accounts as seen by the occupancy core.

Authentication lives elsewhere; this model carries identity, role and the
student profiles a user has been linked to.
"""

from typing import List, Optional

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_occupancy.models.base.base_model import Base, TimestampModel
from hostel_occupancy.models.base.enums import UserRole

__all__ = ["User", "user_student_profiles"]


# Set semantics: a student appears at most once per user
user_student_profiles = Table(
    "user_student_profiles",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", String(36), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
)


class User(TimestampModel):
    """Platform user: student, hostel owner, admin or staff."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.STUDENT,
        index=True,
    )

    student_profiles: Mapped[List["Student"]] = relationship(
        "Student",
        secondary=user_student_profiles,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
