"""
Booking schemas covering the whole lifecycle.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from hostel_occupancy.models.base.enums import BookingSource, BookingStatus
from hostel_occupancy.schemas.common.base import (
    BaseCreateSchema,
    BaseDBSchema,
    BaseFilterSchema,
    BaseSchema,
    BaseUpdateSchema,
)
from hostel_occupancy.schemas.room.bed_base import normalize_bed_number

__all__ = [
    "EmergencyContact",
    "BookingDocument",
    "BookingCreate",
    "BookingUpdate",
    "BookingCancelRequest",
    "BookingCheckOutRequest",
    "BookingTerminateRequest",
    "BookingPaymentUpdate",
    "BookingFilter",
    "ReviewCreate",
    "ReviewResponse",
    "RefundDetails",
    "BookingResponse",
]


class EmergencyContact(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    relationship: str = Field(..., min_length=1, max_length=50)
    phone: str = Field(..., min_length=5, max_length=20)


class BookingDocument(BaseSchema):
    document_type: str = Field(..., min_length=1, max_length=50)
    url: str = Field(..., min_length=1, max_length=500)


class BookingCreate(BaseCreateSchema):
    """
    New booking request.

    ``user_id`` and ``created_by`` are honoured only for hostel managers
    booking on someone's behalf.
    """

    hostel_id: str
    room_id: str
    bed_number: str = Field(..., min_length=1, max_length=20)
    check_in_date: datetime
    duration_months: int = Field(..., description="Stay length in calendar months")
    emergency_contact: EmergencyContact
    documents: List[BookingDocument] = Field(default_factory=list)
    notes: Optional[str] = Field(default=None, max_length=1000)
    advance_paid: Decimal = Field(default=Decimal("0"), ge=0)
    deposit_paid_amount: Decimal = Field(default=Decimal("0"), ge=0)
    user_id: Optional[str] = None
    created_by: Optional[BookingSource] = None

    @field_validator("bed_number")
    @classmethod
    def validate_bed_number(cls, v: str) -> str:
        return normalize_bed_number(v)


class BookingUpdate(BaseUpdateSchema):
    """Field edits; which keys are allowed depends on actor and status."""

    hostel_id: Optional[str] = None
    room_id: Optional[str] = None
    bed_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    user_id: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    documents: Optional[List[BookingDocument]] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("bed_number")
    @classmethod
    def validate_bed_number(cls, v: Optional[str]) -> Optional[str]:
        return normalize_bed_number(v) if v is not None else v


class BookingCancelRequest(BaseSchema):
    reason: Optional[str] = Field(default=None, max_length=500)


class BookingCheckOutRequest(BaseSchema):
    """
    Check-out settlement.

    ``refund_amount`` caps the refund; the default refund is the security
    deposit less damages.
    """

    refund_amount: Optional[Decimal] = Field(default=None, ge=0)
    damages: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)


class BookingTerminateRequest(BaseSchema):
    reason: str = Field(..., min_length=1, max_length=500)


class BookingPaymentUpdate(BaseSchema):
    advance_amount: Decimal = Field(default=Decimal("0"), ge=0)
    deposit_amount: Decimal = Field(default=Decimal("0"), ge=0)


class BookingFilter(BaseFilterSchema):
    status: Optional[BookingStatus] = None
    hostel_id: Optional[str] = None
    upcoming: bool = False
    active: bool = False


class ReviewCreate(BaseCreateSchema):
    # Range is checked by the service so it surfaces as a domain validation error
    rating: int
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewResponse(BaseDBSchema):
    booking_id: str
    user_id: str
    hostel_id: str
    rating: int
    comment: Optional[str] = None


class RefundDetails(BaseSchema):
    security_deposit: Decimal
    damages: Decimal
    refund_amount: Decimal


class BookingResponse(BaseDBSchema):
    user_id: str
    hostel_id: str
    room_id: Optional[str] = None
    bed_number: str
    student_id: Optional[str] = None
    check_in_date: datetime
    check_out_date: datetime
    duration_months: int
    actual_check_in: Optional[datetime] = None
    actual_check_out: Optional[datetime] = None
    rent_amount: Decimal
    security_deposit: Decimal
    total_amount: Decimal
    advance_paid: Decimal
    deposit_paid_amount: Decimal
    pending_amount: Decimal
    status: BookingStatus
    created_by: BookingSource
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancellation_reason: Optional[str] = None
    terminated_at: Optional[datetime] = None
    termination_reason: Optional[str] = None
    damages: Optional[Decimal] = None
    refund_amount: Optional[Decimal] = None
    emergency_contact: EmergencyContact
    documents: List[BookingDocument] = Field(default_factory=list)
    notes: Optional[str] = None
    review_submitted: bool
    can_review: bool
