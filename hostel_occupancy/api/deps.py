"""
FastAPI dependencies: database session, acting principal and services.

Identity is resolved upstream; this service trusts the ``X-User-Id`` and
``X-User-Role`` headers set by the gateway.

Example usage in a router:

    @router.get("/bookings/{booking_id}")
    def get_booking(
        booking_id: str,
        principal: Principal = Depends(deps.get_current_principal),
        service: BookingService = Depends(deps.get_booking_service),
    ):
        ...
"""

from typing import Generator, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from hostel_occupancy.core.exceptions import AuthorizationError
from hostel_occupancy.db.session import SessionLocal
from hostel_occupancy.models.base.enums import UserRole
from hostel_occupancy.services.booking import BookingService
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.inventory import BedService, HostelService, RoomService
from hostel_occupancy.services.maintenance import MaintenanceService
from hostel_occupancy.services.occupancy import OccupancyCoordinator
from hostel_occupancy.services.payment import PaymentService
from hostel_occupancy.services.student import StudentConversionService


# --- Database -----------------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a SQLAlchemy Session bound to SessionLocal.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# --- Identity -----------------------------------------------------------------

def get_current_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Principal:
    if not x_user_id or not x_user_role:
        raise AuthorizationError("Missing actor identity headers", action="authenticate")
    try:
        role = UserRole(x_user_role.lower())
    except ValueError:
        raise AuthorizationError(f"Unknown role '{x_user_role}'", action="authenticate") from None
    return Principal(user_id=x_user_id, role=role)


# --- Services -----------------------------------------------------------------

def get_hostel_service(db: Session = Depends(get_db)) -> HostelService:
    return HostelService(db)


def get_room_service(db: Session = Depends(get_db)) -> RoomService:
    return RoomService(db)


def get_bed_service(db: Session = Depends(get_db)) -> BedService:
    return BedService(db)


def get_occupancy_coordinator(db: Session = Depends(get_db)) -> OccupancyCoordinator:
    return OccupancyCoordinator(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_student_service(db: Session = Depends(get_db)) -> StudentConversionService:
    return StudentConversionService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_maintenance_service(db: Session = Depends(get_db)) -> MaintenanceService:
    return MaintenanceService(db)


__all__ = [
    "get_db",
    "get_current_principal",
    "get_hostel_service",
    "get_room_service",
    "get_bed_service",
    "get_occupancy_coordinator",
    "get_booking_service",
    "get_student_service",
    "get_payment_service",
    "get_maintenance_service",
]
