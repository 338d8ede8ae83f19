"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the hostel occupancy service
"""
from fastapi import APIRouter

from hostel_occupancy.api.v1.endpoints import beds, bookings, hostels, maintenance, payments, rooms, students
from hostel_occupancy.core.config import settings
from hostel_occupancy.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(hostels.router)
router.include_router(rooms.router)
router.include_router(beds.router)
router.include_router(bookings.router)
router.include_router(students.router)
router.include_router(payments.router)
router.include_router(maintenance.router)


@router.get("/health", tags=["System Health"])
def api_health_check():
    """
    API health check
    """
    return {
        "status": "healthy",
        "version": settings.PROJECT_VERSION,
        "api_version": "v1",
        "total_routes": len(router.routes),
    }


logger.info("API v1 router initialized", extra={"total_routes": len(router.routes)})
