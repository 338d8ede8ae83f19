"""
Bed schemas: creation, patches, holds, assignment and projections.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from hostel_occupancy.models.base.enums import BedStatus, RoomType
from hostel_occupancy.schemas.common.base import BaseCreateSchema, BaseFilterSchema, BaseSchema, BaseUpdateSchema

__all__ = [
    "normalize_bed_number",
    "BedCreate",
    "BedUpdate",
    "BulkBedUpdateItem",
    "BulkBedUpdate",
    "BedReserveRequest",
    "BedAssignmentRequest",
    "BedSwapRequest",
    "AvailableBedFilter",
    "BedResponse",
    "OccupantSnapshot",
    "AvailableBedResponse",
]


def normalize_bed_number(value: str) -> str:
    """Canonical bed number: trimmed, upper-case, single-spaced."""
    value = " ".join((value or "").strip().upper().split())
    if not value:
        raise ValueError("Bed number cannot be empty")
    return value


class _BedNumberMixin(BaseSchema):
    bed_number: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Bed identifier within room (A, B1, Bed-1, etc.)",
        examples=["A", "B1", "Bed-1"],
    )

    @field_validator("bed_number")
    @classmethod
    def validate_bed_number(cls, v: str) -> str:
        return normalize_bed_number(v)


class BedCreate(_BedNumberMixin, BaseCreateSchema):
    """
    Schema for adding a bed to a room.

    Without ``rent_amount`` the room's base rent is used.
    """

    rent_amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    amenities: List[str] = Field(default_factory=list)


class BedUpdate(BaseUpdateSchema):
    """Partial bed update: rent, amenities, status."""

    rent_amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    amenities: Optional[List[str]] = None
    status: Optional[BedStatus] = None


class BulkBedUpdateItem(_BedNumberMixin, BedUpdate):
    pass


class BulkBedUpdate(BaseUpdateSchema):
    updates: List[BulkBedUpdateItem] = Field(..., min_length=1)


class BedReserveRequest(BaseCreateSchema):
    """Temporary hold of a bed for one user."""

    user_id: str = Field(..., description="User the bed is held for")
    reservation_expiry: Optional[datetime] = Field(
        default=None,
        description="Advisory expiry; holds are not released automatically",
    )


class BedAssignmentRequest(BaseCreateSchema):
    """
    Occupant for a bed: either an existing booking or direct student details.
    """

    booking_id: Optional[str] = None
    user_id: Optional[str] = Field(default=None, description="Occupying user account, if any")
    student_code: Optional[str] = Field(default=None, max_length=50)
    student_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    student_phone: Optional[str] = Field(default=None, max_length=20)
    student_email: Optional[EmailStr] = None
    check_in_date: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_occupant(self) -> "BedAssignmentRequest":
        if not self.booking_id and not self.student_name:
            raise ValueError("Either booking_id or student_name is required")
        return self


class BedSwapRequest(BaseCreateSchema):
    bed_number_a: str = Field(..., min_length=1, max_length=20)
    bed_number_b: str = Field(..., min_length=1, max_length=20)

    @field_validator("bed_number_a", "bed_number_b")
    @classmethod
    def validate_bed_numbers(cls, v: str) -> str:
        return normalize_bed_number(v)

    @model_validator(mode="after")
    def validate_distinct(self) -> "BedSwapRequest":
        if self.bed_number_a == self.bed_number_b:
            raise ValueError("Cannot swap a bed with itself")
        return self


class AvailableBedFilter(BaseFilterSchema):
    floor: Optional[int] = None
    room_type: Optional[RoomType] = None
    min_rent: Optional[Decimal] = Field(default=None, ge=0)
    max_rent: Optional[Decimal] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_rent_range(self) -> "AvailableBedFilter":
        if self.min_rent is not None and self.max_rent is not None and self.min_rent > self.max_rent:
            raise ValueError("min_rent cannot exceed max_rent")
        return self


class BedResponse(BaseSchema):
    bed_number: str
    position: int
    status: BedStatus
    is_occupied: bool
    current_occupant_id: Optional[str] = None
    held_by_id: Optional[str] = None
    reservation_expiry: Optional[datetime] = None
    rent_amount: Decimal
    amenities: List[str] = Field(default_factory=list)
    student_code: Optional[str] = None
    student_name: Optional[str] = None
    student_phone: Optional[str] = None
    student_email: Optional[str] = None
    check_in_date: Optional[datetime] = None
    last_status_change: Optional[datetime] = None


class OccupantSnapshot(BaseSchema):
    """Who occupied a bed right before it was vacated."""

    current_occupant_id: Optional[str] = None
    student_code: Optional[str] = None
    student_name: Optional[str] = None
    student_phone: Optional[str] = None
    student_email: Optional[str] = None
    check_in_date: Optional[datetime] = None


class AvailableBedResponse(BaseSchema):
    hostel_id: str
    room_id: str
    room_number: str
    floor: int
    room_type: RoomType
    bed_number: str
    rent_amount: Decimal
    amenities: List[str] = Field(default_factory=list)
