"""
Student endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from hostel_occupancy.api import deps
from hostel_occupancy.api.responses import dump, dump_many, respond
from hostel_occupancy.models.base.enums import StudentStatus
from hostel_occupancy.schemas.student import StudentLinkUserRequest, StudentResponse, UserHostelResponse
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.student import StudentConversionService

router = APIRouter(tags=["Student Management"])


@router.get("/hostels/{hostel_id}/students")
def list_students(
    hostel_id: str,
    status: Optional[StudentStatus] = Query(default=None),
    principal: Principal = Depends(deps.get_current_principal),
    service: StudentConversionService = Depends(deps.get_student_service),
):
    result = service.list_students(principal, hostel_id, status.value if status else None)
    return respond(result, lambda students: dump_many(StudentResponse, students))


@router.get("/students/{student_id}")
def get_student(
    student_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: StudentConversionService = Depends(deps.get_student_service),
):
    return respond(service.get_student(principal, student_id), lambda student: dump(StudentResponse, student))


@router.post("/students/{student_id}/link-user")
def link_user(
    student_id: str,
    payload: StudentLinkUserRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: StudentConversionService = Depends(deps.get_student_service),
):
    result = service.link_user(principal, student_id, payload.user_id)
    return respond(result, lambda student: dump(StudentResponse, student))


@router.post("/students/{student_id}/check-out")
def check_out_student(
    student_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: StudentConversionService = Depends(deps.get_student_service),
):
    return respond(service.check_out(principal, student_id), lambda student: dump(StudentResponse, student))


@router.get("/users/{user_id}/hostels")
def list_user_hostels(
    user_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: StudentConversionService = Depends(deps.get_student_service),
):
    result = service.list_user_hostels(principal, user_id)
    return respond(result, lambda entries: dump_many(UserHostelResponse, entries))
