"""
Bed endpoints: inventory edits, holds and occupancy.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from hostel_occupancy.api import deps
from hostel_occupancy.api.responses import dump, dump_many, respond
from hostel_occupancy.schemas.booking import BookingResponse
from hostel_occupancy.schemas.maintenance import MaintenanceResponse
from hostel_occupancy.schemas.room import (
    BedAssignmentRequest,
    BedCreate,
    BedReserveRequest,
    BedResponse,
    BedSwapRequest,
    BedUpdate,
    BulkBedUpdate,
    OccupantSnapshot,
)
from hostel_occupancy.schemas.student import StudentResponse
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.inventory import BedService
from hostel_occupancy.services.occupancy import OccupancyCoordinator

router = APIRouter(prefix="/rooms/{room_id}/beds", tags=["Bed Management"])


def _bed(bed) -> Dict[str, Any]:
    return dump(BedResponse, bed)


@router.post("", status_code=201)
def add_bed(
    room_id: str,
    payload: BedCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    return respond(service.add_bed(principal, room_id, payload), _bed, status_code=201)


@router.get("")
def list_beds(room_id: str, service: BedService = Depends(deps.get_bed_service)):
    return respond(service.list_beds(room_id), lambda beds: dump_many(BedResponse, beds))


@router.post("/bulk-update")
def bulk_update_beds(
    room_id: str,
    payload: BulkBedUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    result = service.bulk_update_beds(principal, room_id, payload)
    return respond(
        result,
        lambda outcome: {"updated": dump_many(BedResponse, outcome["updated"]), "failed": outcome["failed"]},
    )


@router.post("/swap")
def swap_beds(
    room_id: str,
    payload: BedSwapRequest,
    principal: Principal = Depends(deps.get_current_principal),
    coordinator: OccupancyCoordinator = Depends(deps.get_occupancy_coordinator),
):
    result = coordinator.swap_beds(principal, room_id, payload)
    return respond(result, lambda swapped: {"bed_a": _bed(swapped["bed_a"]), "bed_b": _bed(swapped["bed_b"])})


@router.get("/{bed_number}")
def get_bed(room_id: str, bed_number: str, service: BedService = Depends(deps.get_bed_service)):
    return respond(service.get_bed(room_id, bed_number), _bed)


@router.get("/{bed_number}/history")
def get_bed_history(
    room_id: str,
    bed_number: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    result = service.get_bed_history(principal, room_id, bed_number)
    return respond(
        result,
        lambda history: {
            "bed": _bed(history["bed"]),
            "bookings": dump_many(BookingResponse, history["bookings"]),
            "maintenance": dump_many(MaintenanceResponse, history["maintenance"]),
        },
    )


@router.patch("/{bed_number}")
def update_bed(
    room_id: str,
    bed_number: str,
    payload: BedUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    return respond(service.update_bed(principal, room_id, bed_number, payload), _bed)


@router.delete("/{bed_number}")
def delete_bed(
    room_id: str,
    bed_number: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    return respond(service.delete_bed(principal, room_id, bed_number), _bed)


@router.post("/{bed_number}/maintenance")
def set_maintenance(
    room_id: str,
    bed_number: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    return respond(service.set_maintenance(principal, room_id, bed_number), _bed)


@router.post("/{bed_number}/reserve")
def reserve_bed(
    room_id: str,
    bed_number: str,
    payload: BedReserveRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    return respond(service.reserve_bed(principal, room_id, bed_number, payload), _bed)


@router.delete("/{bed_number}/reservation")
def cancel_reservation(
    room_id: str,
    bed_number: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: BedService = Depends(deps.get_bed_service),
):
    return respond(service.cancel_reservation(principal, room_id, bed_number), _bed)


@router.post("/{bed_number}/assign")
def assign_bed(
    room_id: str,
    bed_number: str,
    payload: BedAssignmentRequest,
    principal: Principal = Depends(deps.get_current_principal),
    coordinator: OccupancyCoordinator = Depends(deps.get_occupancy_coordinator),
):
    result = coordinator.assign_bed(principal, room_id, bed_number, payload)
    return respond(
        result,
        lambda assigned: {"bed": _bed(assigned["bed"]), "booking": dump(BookingResponse, assigned["booking"])},
    )


@router.post("/{bed_number}/vacate")
def vacate_bed(
    room_id: str,
    bed_number: str,
    principal: Principal = Depends(deps.get_current_principal),
    coordinator: OccupancyCoordinator = Depends(deps.get_occupancy_coordinator),
):
    result = coordinator.vacate_bed(principal, room_id, bed_number)
    return respond(
        result,
        lambda vacated: {
            "bed": _bed(vacated["bed"]),
            "previous_occupant": dump(OccupantSnapshot, vacated["previous_occupant"]),
            "booking": dump(BookingResponse, vacated["booking"]),
            "student": dump(StudentResponse, vacated["student"]),
        },
    )
