"""
Room endpoints.
"""

from fastapi import APIRouter, Depends

from hostel_occupancy.api import deps
from hostel_occupancy.api.responses import dump, dump_many, respond
from hostel_occupancy.schemas.room import RoomCreate, RoomResponse, RoomUpdate
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.inventory import RoomService

router = APIRouter(tags=["Room Management"])


@router.post("/hostels/{hostel_id}/rooms", status_code=201)
def create_room(
    hostel_id: str,
    payload: RoomCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    result = service.create_room(principal, hostel_id, payload)
    return respond(result, lambda room: dump(RoomResponse, room), status_code=201)


@router.get("/hostels/{hostel_id}/rooms")
def list_rooms(hostel_id: str, service: RoomService = Depends(deps.get_room_service)):
    return respond(service.list_rooms(hostel_id), lambda rooms: dump_many(RoomResponse, rooms))


@router.get("/rooms/{room_id}")
def get_room(room_id: str, service: RoomService = Depends(deps.get_room_service)):
    return respond(service.get_room(room_id), lambda room: dump(RoomResponse, room))


@router.patch("/rooms/{room_id}")
def update_room(
    room_id: str,
    payload: RoomUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return respond(service.update_room(principal, room_id, payload), lambda room: dump(RoomResponse, room))


@router.delete("/rooms/{room_id}")
def delete_room(
    room_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return respond(service.delete_room(principal, room_id), lambda deleted: {"id": room_id, "deleted": deleted})
