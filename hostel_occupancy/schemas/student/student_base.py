"""
Student schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from hostel_occupancy.models.base.enums import StudentSource, StudentStatus
from hostel_occupancy.schemas.booking.booking_base import EmergencyContact
from hostel_occupancy.schemas.common.base import BaseDBSchema, BaseSchema

__all__ = ["StudentResponse", "StudentLinkUserRequest", "UserHostelResponse"]


class StudentResponse(BaseDBSchema):
    student_code: str
    hostel_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    room_id: Optional[str] = None
    room_number: Optional[str] = None
    bed_number: Optional[str] = None
    check_in_date: Optional[datetime] = None
    expected_check_out_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    status: StudentStatus
    user_id: Optional[str] = None
    has_login_access: bool
    booking_ref_id: Optional[str] = None
    source: StudentSource


class StudentLinkUserRequest(BaseSchema):
    user_id: str = Field(..., description="User account to grant login access")


class UserHostelResponse(BaseSchema):
    """A hostel the user lives or lived in, through one student profile."""

    hostel_id: str
    hostel_name: str
    student_id: str
    student_code: str
    status: StudentStatus
