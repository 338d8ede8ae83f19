from hostel_occupancy.schemas.student.student_base import (
    StudentLinkUserRequest,
    StudentResponse,
    UserHostelResponse,
)

__all__ = ["StudentLinkUserRequest", "StudentResponse", "UserHostelResponse"]
