from hostel_occupancy.models.maintenance.maintenance_request import (
    MAINTENANCE_TRANSITIONS,
    OPEN_MAINTENANCE_STATUSES,
    MaintenanceRequest,
    ensure_maintenance_transition,
)

__all__ = [
    "MAINTENANCE_TRANSITIONS",
    "OPEN_MAINTENANCE_STATUSES",
    "MaintenanceRequest",
    "ensure_maintenance_transition",
]
