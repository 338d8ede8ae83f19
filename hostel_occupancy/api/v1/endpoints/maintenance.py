"""
Maintenance ticket endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from hostel_occupancy.api import deps
from hostel_occupancy.api.responses import dump, dump_many, respond
from hostel_occupancy.models.base.enums import (
    MaintenanceCategory,
    MaintenancePriority,
    MaintenanceStatus,
)
from hostel_occupancy.schemas.maintenance import (
    MaintenanceAssignRequest,
    MaintenanceCreate,
    MaintenanceFeedbackRequest,
    MaintenanceFilter,
    MaintenanceResponse,
    MaintenanceStatusUpdate,
)
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.maintenance import MaintenanceService

router = APIRouter(tags=["Maintenance"])


def _ticket(request):
    return dump(MaintenanceResponse, request)


@router.post("/maintenance", status_code=201)
def create_request(
    payload: MaintenanceCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.create_request(principal, payload), _ticket, status_code=201)


@router.get("/maintenance/my-requests")
def list_my_requests(
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.list_my_requests(principal), lambda requests: dump_many(MaintenanceResponse, requests))


@router.get("/maintenance/{request_id}")
def get_request(
    request_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.get_request(principal, request_id), _ticket)


@router.patch("/maintenance/{request_id}")
def update_request(
    request_id: str,
    payload: MaintenanceStatusUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.update_status(principal, request_id, payload), _ticket)


@router.post("/maintenance/{request_id}/assign")
def assign_request(
    request_id: str,
    payload: MaintenanceAssignRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.assign(principal, request_id, payload), _ticket)


@router.post("/maintenance/{request_id}/feedback")
def add_feedback(
    request_id: str,
    payload: MaintenanceFeedbackRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.add_feedback(principal, request_id, payload), _ticket)


@router.delete("/maintenance/{request_id}")
def delete_request(
    request_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.delete_request(principal, request_id), lambda deleted_id: {"id": deleted_id})


@router.get("/hostels/{hostel_id}/maintenance")
def list_hostel_requests(
    hostel_id: str,
    status: Optional[MaintenanceStatus] = None,
    priority: Optional[MaintenancePriority] = None,
    category: Optional[MaintenanceCategory] = None,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    filters = MaintenanceFilter(status=status, priority=priority, category=category)
    result = service.list_hostel_requests(principal, hostel_id, filters)
    return respond(result, lambda requests: dump_many(MaintenanceResponse, requests))


@router.get("/hostels/{hostel_id}/maintenance/stats")
def get_stats(
    hostel_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: MaintenanceService = Depends(deps.get_maintenance_service),
):
    return respond(service.get_stats(principal, hostel_id), lambda stats: stats.model_dump(mode="json"))
