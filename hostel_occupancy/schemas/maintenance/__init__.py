from hostel_occupancy.schemas.maintenance.maintenance_base import (
    MaintenanceAssignRequest,
    MaintenanceCreate,
    MaintenanceFeedbackRequest,
    MaintenanceFilter,
    MaintenanceResponse,
    MaintenanceStats,
    MaintenanceStatusUpdate,
)

__all__ = [
    "MaintenanceAssignRequest",
    "MaintenanceCreate",
    "MaintenanceFeedbackRequest",
    "MaintenanceFilter",
    "MaintenanceResponse",
    "MaintenanceStats",
    "MaintenanceStatusUpdate",
]
