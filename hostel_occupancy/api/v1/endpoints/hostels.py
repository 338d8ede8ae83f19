"""
Hostel endpoints.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hostel_occupancy.api import deps
from hostel_occupancy.api.responses import dump, dump_many, respond
from hostel_occupancy.models.base.enums import RoomType
from hostel_occupancy.schemas.hostel import HostelAddressUpdate, HostelCreate, HostelResponse
from hostel_occupancy.schemas.room import AvailableBedFilter
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.inventory import BedService, HostelService

router = APIRouter(prefix="/hostels", tags=["Hostel Management"])


@router.post("", status_code=201)
def create_hostel(
    payload: HostelCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: HostelService = Depends(deps.get_hostel_service),
):
    result = service.create_hostel(principal, payload)
    return respond(result, lambda hostel: dump(HostelResponse, hostel), status_code=201)


@router.get("")
def list_hostels(
    owner_id: Optional[str] = Query(default=None),
    service: HostelService = Depends(deps.get_hostel_service),
):
    return respond(service.list_hostels(owner_id), lambda hostels: dump_many(HostelResponse, hostels))


@router.get("/{hostel_id}")
def get_hostel(hostel_id: str, service: HostelService = Depends(deps.get_hostel_service)):
    return respond(service.get_hostel(hostel_id), lambda hostel: dump(HostelResponse, hostel))


@router.patch("/{hostel_id}/address")
def update_hostel_address(
    hostel_id: str,
    payload: HostelAddressUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: HostelService = Depends(deps.get_hostel_service),
):
    result = service.update_address(principal, hostel_id, payload)
    return respond(result, lambda hostel: dump(HostelResponse, hostel))


@router.get("/{hostel_id}/available-beds")
def list_available_beds(
    hostel_id: str,
    floor: Optional[int] = Query(default=None),
    room_type: Optional[RoomType] = Query(default=None),
    min_rent: Optional[Decimal] = Query(default=None, ge=0),
    max_rent: Optional[Decimal] = Query(default=None, ge=0),
    service: BedService = Depends(deps.get_bed_service),
):
    filters = AvailableBedFilter(floor=floor, room_type=room_type, min_rent=min_rent, max_rent=max_rent)
    result = service.list_available_beds(hostel_id, filters)
    return respond(result, lambda beds: [bed.model_dump(mode="json") for bed in beds])
