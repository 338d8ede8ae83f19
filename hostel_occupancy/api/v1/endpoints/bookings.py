"""
Booking endpoints.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from hostel_occupancy.api import deps
from hostel_occupancy.api.responses import dump, dump_many, respond
from hostel_occupancy.models.base.enums import BookingStatus
from hostel_occupancy.schemas.booking import (
    BookingCancelRequest,
    BookingCheckOutRequest,
    BookingCreate,
    BookingFilter,
    BookingPaymentUpdate,
    BookingResponse,
    BookingTerminateRequest,
    BookingUpdate,
    RefundDetails,
    ReviewCreate,
    ReviewResponse,
)
from hostel_occupancy.schemas.room import BedResponse, OccupantSnapshot
from hostel_occupancy.schemas.student import StudentResponse
from hostel_occupancy.services.booking import BookingService
from hostel_occupancy.services.common.permissions import Principal

router = APIRouter(prefix="/bookings", tags=["Booking Management"])


def _booking(booking) -> Dict[str, Any]:
    return dump(BookingResponse, booking)


def _stay(outcome: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize a coordinator outcome; keys absent from the outcome are omitted."""
    rendered = {
        "booking": _booking(outcome["booking"]),
        "student": dump(StudentResponse, outcome.get("student")),
    }
    if "bed" in outcome:
        rendered["bed"] = dump(BedResponse, outcome["bed"])
    if "refund" in outcome:
        rendered["refund"] = dump(RefundDetails, outcome["refund"])
    if "previous_occupant" in outcome:
        rendered["previous_occupant"] = dump(OccupantSnapshot, outcome["previous_occupant"])
    return rendered


@router.post("", status_code=201)
def create_booking(
    payload: BookingCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.create_booking(principal, payload), _booking, status_code=201)


@router.get("")
def list_bookings(
    status: Optional[BookingStatus] = Query(default=None),
    hostel_id: Optional[str] = Query(default=None),
    upcoming: bool = Query(default=False),
    active: bool = Query(default=False),
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    filters = BookingFilter(status=status, hostel_id=hostel_id, upcoming=upcoming, active=active)
    return respond(service.list_bookings(principal, filters), lambda bookings: dump_many(BookingResponse, bookings))


@router.get("/{booking_id}")
def get_booking(
    booking_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.get_booking(principal, booking_id), _booking)


@router.patch("/{booking_id}")
def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.update_booking(principal, booking_id, payload), _booking)


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.delete_booking(principal, booking_id))


@router.post("/{booking_id}/confirm")
def confirm_booking(
    booking_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.confirm_booking(principal, booking_id), _booking)


@router.post("/{booking_id}/check-in")
def check_in(
    booking_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.check_in(principal, booking_id), _stay)


@router.post("/{booking_id}/check-out")
def check_out(
    booking_id: str,
    payload: Optional[BookingCheckOutRequest] = None,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.check_out(principal, booking_id, payload), _stay)


@router.post("/{booking_id}/cancel")
def cancel_booking(
    booking_id: str,
    payload: Optional[BookingCancelRequest] = None,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.cancel_booking(principal, booking_id, payload), _booking)


@router.post("/{booking_id}/complete")
def complete_booking(
    booking_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.complete_booking(principal, booking_id), _booking)


@router.post("/{booking_id}/no-show")
def mark_no_show(
    booking_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.mark_no_show(principal, booking_id), _booking)


@router.post("/{booking_id}/terminate")
def terminate_booking(
    booking_id: str,
    payload: BookingTerminateRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.terminate(principal, booking_id, payload.reason), _stay)


@router.post("/{booking_id}/advance-payments")
def record_booking_payment(
    booking_id: str,
    payload: BookingPaymentUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return respond(service.record_booking_payment(principal, booking_id, payload), _booking)


@router.post("/{booking_id}/review", status_code=201)
def submit_review(
    booking_id: str,
    payload: ReviewCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    result = service.submit_review(principal, booking_id, payload)
    return respond(result, lambda review: dump(ReviewResponse, review), status_code=201)
