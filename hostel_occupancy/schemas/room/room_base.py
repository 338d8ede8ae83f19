"""
Room schemas.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from hostel_occupancy.models.base.enums import RoomStatus, RoomType
from hostel_occupancy.schemas.common.base import BaseCreateSchema, BaseDBSchema, BaseUpdateSchema
from hostel_occupancy.schemas.room.bed_base import BedCreate, BedResponse

__all__ = ["RoomCreate", "RoomUpdate", "RoomResponse"]


class RoomCreate(BaseCreateSchema):
    """
    Schema for creating a room, optionally with its initial beds.
    """

    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(default=0, ge=0)
    room_type: RoomType
    capacity: int = Field(..., ge=1, le=50)
    base_rent: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    amenities: List[str] = Field(default_factory=list)
    beds: List[BedCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_bed_rent(self) -> "RoomCreate":
        if self.base_rent is None and any(bed.rent_amount is None for bed in self.beds):
            raise ValueError("Every bed needs a rent_amount when the room has no base_rent")
        return self


class RoomUpdate(BaseUpdateSchema):
    floor: Optional[int] = Field(default=None, ge=0)
    room_type: Optional[RoomType] = None
    capacity: Optional[int] = Field(default=None, ge=1, le=50)
    base_rent: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    amenities: Optional[List[str]] = None


class RoomResponse(BaseDBSchema):
    hostel_id: str
    room_number: str
    floor: int
    room_type: RoomType
    capacity: int
    base_rent: Optional[Decimal] = None
    amenities: List[str] = Field(default_factory=list)
    current_occupancy: int
    status: RoomStatus
    version: int
    beds: List[BedResponse] = Field(default_factory=list)
