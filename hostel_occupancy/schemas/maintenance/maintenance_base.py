"""
Maintenance ticket schemas.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import Field, field_validator, model_validator

from hostel_occupancy.models.base.enums import (
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
)
from hostel_occupancy.schemas.common.base import (
    BaseCreateSchema,
    BaseDBSchema,
    BaseFilterSchema,
    BaseSchema,
    BaseUpdateSchema,
)
from hostel_occupancy.schemas.room.bed_base import normalize_bed_number

__all__ = [
    "MaintenanceCreate",
    "MaintenanceStatusUpdate",
    "MaintenanceAssignRequest",
    "MaintenanceFeedbackRequest",
    "MaintenanceFilter",
    "MaintenanceResponse",
    "MaintenanceStats",
]


class MaintenanceCreate(BaseCreateSchema):
    hostel_id: str
    room_id: Optional[str] = None
    bed_number: Optional[str] = Field(default=None, max_length=20)
    category: MaintenanceCategory
    description: str = Field(..., min_length=1, max_length=2000)
    priority: MaintenancePriority = MaintenancePriority.MEDIUM

    @field_validator("bed_number")
    @classmethod
    def validate_bed_number(cls, v: Optional[str]) -> Optional[str]:
        return normalize_bed_number(v) if v is not None else None

    @model_validator(mode="after")
    def bed_needs_room(self) -> "MaintenanceCreate":
        if self.bed_number is not None and self.room_id is None:
            raise ValueError("room_id is required when bed_number is given")
        return self


class MaintenanceStatusUpdate(BaseUpdateSchema):
    status: Optional[MaintenanceStatus] = None
    estimated_cost: Optional[Decimal] = Field(default=None, ge=0)
    actual_cost: Optional[Decimal] = Field(default=None, ge=0)
    completion_date: Optional[datetime] = None


class MaintenanceAssignRequest(BaseSchema):
    staff_id: str
    estimated_cost: Optional[Decimal] = Field(default=None, ge=0)


class MaintenanceFeedbackRequest(BaseSchema):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=1000)


class MaintenanceFilter(BaseFilterSchema):
    status: Optional[MaintenanceStatus] = None
    priority: Optional[MaintenancePriority] = None
    category: Optional[MaintenanceCategory] = None


class MaintenanceResponse(BaseDBSchema):
    hostel_id: str
    room_id: Optional[str] = None
    bed_number: Optional[str] = None
    bed_offline: bool
    raised_by: str
    assigned_to: Optional[str] = None
    assigned_at: Optional[datetime] = None
    category: MaintenanceCategory
    description: str
    priority: MaintenancePriority
    status: MaintenanceStatus
    status_changed_at: Optional[datetime] = None
    estimated_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    completion_date: Optional[datetime] = None
    feedback_rating: Optional[int] = None
    feedback_comment: Optional[str] = None
    feedback_date: Optional[datetime] = None


class MaintenanceStats(BaseSchema):
    """Ticket counts of one hostel, keyed by status, priority and category."""

    total: int
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(default_factory=dict)
    by_category: Dict[str, int] = Field(default_factory=dict)
