"""
Maintenance ticket raised against a hostel, a room or a single bed.

A ticket on a bed that is free when it is raised takes that bed offline
(``bed_offline``); closing the ticket hands the bed back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, FrozenSet, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_occupancy.core.exceptions import InvalidTransitionError
from hostel_occupancy.models.base.base_model import TimestampModel
from hostel_occupancy.models.base.enums import (
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
    enum_value,
)

__all__ = [
    "MaintenanceRequest",
    "MAINTENANCE_TRANSITIONS",
    "OPEN_MAINTENANCE_STATUSES",
    "ensure_maintenance_transition",
]


MAINTENANCE_TRANSITIONS: Dict[MaintenanceStatus, FrozenSet[MaintenanceStatus]] = {
    MaintenanceStatus.PENDING: frozenset(
        {MaintenanceStatus.IN_PROGRESS, MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED}
    ),
    MaintenanceStatus.IN_PROGRESS: frozenset({MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED}),
    MaintenanceStatus.COMPLETED: frozenset(),
    MaintenanceStatus.CANCELLED: frozenset(),
}

OPEN_MAINTENANCE_STATUSES = (MaintenanceStatus.PENDING, MaintenanceStatus.IN_PROGRESS)


class MaintenanceRequest(TimestampModel):
    """Work order tracked from report to completion."""

    __tablename__ = "maintenance_requests"
    __table_args__ = (
        CheckConstraint(
            "feedback_rating IS NULL OR (feedback_rating >= 1 AND feedback_rating <= 5)",
            name="ck_maintenance_feedback_rating_range",
        ),
    )

    hostel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("rooms.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    bed_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    # Whether raising the ticket moved the bed into maintenance
    bed_offline: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    raised_by: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    category: Mapped[MaintenanceCategory] = mapped_column(String(20), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[MaintenancePriority] = mapped_column(
        String(20),
        nullable=False,
        default=MaintenancePriority.MEDIUM,
        index=True,
    )
    status: Mapped[MaintenanceStatus] = mapped_column(
        String(20),
        nullable=False,
        default=MaintenanceStatus.PENDING,
        index=True,
    )
    status_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    estimated_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    actual_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    completion_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    feedback_rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    feedback_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    feedback_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    hostel: Mapped["Hostel"] = relationship("Hostel")

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_MAINTENANCE_STATUSES

    def can_transition_to(self, target: MaintenanceStatus) -> bool:
        return target in MAINTENANCE_TRANSITIONS.get(MaintenanceStatus(self.status), frozenset())

    def __repr__(self) -> str:
        return f"<MaintenanceRequest(id={self.id}, status={self.status}, bed={self.room_id}/{self.bed_number})>"


def ensure_maintenance_transition(request: MaintenanceRequest, target: MaintenanceStatus) -> None:
    if not request.can_transition_to(target):
        current = enum_value(request.status)
        raise InvalidTransitionError(
            f"Cannot change maintenance status from '{current}' to '{target.value}'",
            from_status=current,
            to_status=target.value,
        )
