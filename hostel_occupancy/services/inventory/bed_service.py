"""
Bed operations exposed by the inventory store.

Every mutation locks the room, checks that the actor manages the hostel,
applies one transition from ``bed_operations`` and persists the room.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from sqlalchemy.orm import Session

from hostel_occupancy.core.exceptions import BaseAppException, ConflictError
from hostel_occupancy.models.base.enums import BedStatus
from hostel_occupancy.models.room import Bed, Room
from hostel_occupancy.repositories.booking import BookingRepository
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.maintenance import MaintenanceRepository
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.repositories.user import UserRepository
from hostel_occupancy.schemas.room import (
    AvailableBedFilter,
    AvailableBedResponse,
    BedCreate,
    BedReserveRequest,
    BedUpdate,
    BulkBedUpdate,
)
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.permissions import Principal, require_hostel_manager
from hostel_occupancy.services.inventory import bed_operations
from hostel_occupancy.utils.datetime_utils import DateTimeHelper, utc_now

T = TypeVar("T")


class BedService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.hostel_repository = HostelRepository(db_session)
        self.room_repository = RoomRepository(db_session)
        self.user_repository = UserRepository(db_session)
        self.booking_repository = BookingRepository(db_session)
        self.maintenance_repository = MaintenanceRepository(db_session)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_bed(self, principal: Principal, room_id: str, data: BedCreate) -> ServiceResult[Bed]:
        return self._mutate_room(
            principal,
            room_id,
            "add bed",
            lambda room, now: bed_operations.add_bed(room, data.bed_number, data.rent_amount, data.amenities, now),
            "Bed added successfully",
        )

    def update_bed(
        self,
        principal: Principal,
        room_id: str,
        bed_number: str,
        data: BedUpdate,
    ) -> ServiceResult[Bed]:
        patch = data.model_dump(exclude_unset=True)

        def update(room: Room, now: datetime) -> Bed:
            self._ensure_not_held_by_ticket(room, bed_number, patch)
            return bed_operations.update_bed(room, bed_number, patch, now)

        return self._mutate_room(
            principal,
            room_id,
            "update bed",
            update,
            "Bed updated successfully",
        )

    def delete_bed(self, principal: Principal, room_id: str, bed_number: str) -> ServiceResult[Bed]:
        return self._mutate_room(
            principal,
            room_id,
            "delete bed",
            lambda room, now: bed_operations.delete_bed(room, bed_number),
            "Bed deleted successfully",
        )

    def set_maintenance(self, principal: Principal, room_id: str, bed_number: str) -> ServiceResult[Bed]:
        return self._mutate_room(
            principal,
            room_id,
            "set bed maintenance",
            lambda room, now: bed_operations.set_maintenance(room, bed_number, now),
            "Bed marked for maintenance",
        )

    def reserve_bed(
        self,
        principal: Principal,
        room_id: str,
        bed_number: str,
        data: BedReserveRequest,
    ) -> ServiceResult[Bed]:
        def reserve(room: Room, now: datetime) -> Bed:
            holder = self.user_repository.get_by_id(data.user_id)
            expiry = DateTimeHelper.to_naive_utc(data.reservation_expiry)
            return bed_operations.reserve_bed(room, bed_number, holder.id, expiry, now)

        return self._mutate_room(principal, room_id, "reserve bed", reserve, "Bed reserved successfully")

    def cancel_reservation(self, principal: Principal, room_id: str, bed_number: str) -> ServiceResult[Bed]:
        return self._mutate_room(
            principal,
            room_id,
            "cancel bed reservation",
            lambda room, now: bed_operations.cancel_reservation(room, bed_number, now),
            "Reservation cancelled successfully",
        )

    def bulk_update_beds(
        self,
        principal: Principal,
        room_id: str,
        data: BulkBedUpdate,
    ) -> ServiceResult[Dict[str, Any]]:
        """
        Apply several bed updates in one room save.

        Each item follows the single-bed update rules; rejected items are
        reported in ``failed`` and do not block the others.
        """

        def apply(room: Room, now: datetime) -> Dict[str, Any]:
            updated: List[Bed] = []
            failed: List[Dict[str, Any]] = []
            for item in data.updates:
                patch = item.model_dump(exclude_unset=True, exclude={"bed_number"})
                try:
                    self._ensure_not_held_by_ticket(room, item.bed_number, patch)
                    updated.append(bed_operations.update_bed(room, item.bed_number, patch, now))
                except BaseAppException as e:
                    failed.append({"bed_number": item.bed_number, "code": e.error_code.value, "message": e.message})
            return {"updated": updated, "failed": failed}

        return self._mutate_room(principal, room_id, "bulk update beds", apply, "Bulk bed update processed")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_beds(self, room_id: str) -> ServiceResult[List[Bed]]:
        return self._read("list beds", lambda: list(self.room_repository.get_by_id(room_id).beds), room_id)

    def get_bed(self, room_id: str, bed_number: str) -> ServiceResult[Bed]:
        return self._read(
            "get bed",
            lambda: bed_operations.find_bed(self.room_repository.get_by_id(room_id), bed_number),
            room_id,
        )

    def get_bed_history(self, principal: Principal, room_id: str, bed_number: str) -> ServiceResult[Dict[str, Any]]:
        """The bed with every booking placed on it and its maintenance tickets."""

        def query() -> Dict[str, Any]:
            room = self.room_repository.get_by_id(room_id)
            require_hostel_manager(principal, room.hostel, "view bed history")
            bed = bed_operations.find_bed(room, bed_number)
            return {
                "bed": bed,
                "bookings": self.booking_repository.list_for_bed(room.id, bed.bed_number),
                "maintenance": self.maintenance_repository.list_for_bed(room.id, bed.bed_number),
            }

        return self._read("get bed history", query, room_id)

    def list_available_beds(
        self,
        hostel_id: str,
        filters: Optional[AvailableBedFilter] = None,
    ) -> ServiceResult[Iterator[AvailableBedResponse]]:
        """
        Lazily list free beds of a hostel matching all filters.

        The returned iterator queries on first use; call again for a fresh
        sequence.
        """
        filters = filters or AvailableBedFilter()

        def query() -> Iterator[AvailableBedResponse]:
            self.hostel_repository.get_by_id(hostel_id)
            return self._iter_available(hostel_id, filters)

        return self._read("list available beds", query, hostel_id)

    def _iter_available(self, hostel_id: str, filters: AvailableBedFilter) -> Iterator[AvailableBedResponse]:
        beds = self.room_repository.iter_available_beds(
            hostel_id,
            floor=filters.floor,
            room_type=filters.room_type.value if filters.room_type else None,
            min_rent=filters.min_rent,
            max_rent=filters.max_rent,
        )
        for room, bed in beds:
            yield AvailableBedResponse(
                hostel_id=room.hostel_id,
                room_id=room.id,
                room_number=room.room_number,
                floor=room.floor,
                room_type=room.room_type,
                bed_number=bed.bed_number,
                rent_amount=bed.rent_amount,
                amenities=list(bed.amenities or []),
            )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _ensure_not_held_by_ticket(self, room: Room, bed_number: str, patch: Dict[str, Any]) -> None:
        if patch.get("status") != BedStatus.AVAILABLE:
            return
        bed = bed_operations.find_bed(room, bed_number)
        if bed.status == BedStatus.MAINTENANCE and self.maintenance_repository.open_offline_exists(
            room.id, bed.bed_number
        ):
            raise ConflictError(
                f"Bed {bed.bed_number} has open maintenance requests",
                details={"bed_number": bed.bed_number},
            )

    def _mutate_room(
        self,
        principal: Principal,
        room_id: str,
        operation: str,
        mutate: Callable[[Room, datetime], T],
        message: str,
    ) -> ServiceResult[T]:
        def unit() -> T:
            room = self.room_repository.get_for_update(room_id)
            require_hostel_manager(principal, room.hostel, operation)

            now = utc_now()
            result = mutate(room, now)
            self.room_repository.save(room, now)
            self._log_operation(
                operation.replace(" ", "_"),
                room.id,
                {"occupancy": room.current_occupancy, "room_status": room.status},
            )
            return result

        return self._execute(operation, unit, room_id, message=message, attempts=self.retry_attempts)
