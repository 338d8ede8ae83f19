"""
Hostel schemas.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from hostel_occupancy.schemas.common.base import BaseCreateSchema, BaseDBSchema, BaseUpdateSchema

__all__ = ["HostelCreate", "HostelAddressUpdate", "HostelResponse"]


class HostelCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: Optional[str] = Field(default=None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    amenities: List[str] = Field(default_factory=list)
    owner_id: Optional[str] = Field(
        default=None,
        description="Owning user; admins may create on behalf of an owner",
    )


class HostelAddressUpdate(BaseUpdateSchema):
    address_line1: Optional[str] = Field(default=None, min_length=1, max_length=255)
    address_line2: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=20)


class HostelResponse(BaseDBSchema):
    owner_id: str
    name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: Optional[str] = None
    postal_code: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    rating_average: Decimal
    rating_count: int
