"""
Maintenance tickets and their hold on beds.

A ticket raised on a free bed moves the bed into maintenance in the same
unit of work. When the last open ticket holding a bed is completed,
cancelled or deleted the bed becomes available again.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    ValidationError,
)
from hostel_occupancy.models.base.enums import BedStatus, MaintenanceStatus, UserRole, enum_value
from hostel_occupancy.models.hostel import Hostel
from hostel_occupancy.models.maintenance import MaintenanceRequest, ensure_maintenance_transition
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.maintenance import MaintenanceRepository
from hostel_occupancy.repositories.room import RoomRepository
from hostel_occupancy.repositories.student import StudentRepository
from hostel_occupancy.repositories.user import UserRepository
from hostel_occupancy.schemas.maintenance import (
    MaintenanceAssignRequest,
    MaintenanceCreate,
    MaintenanceFeedbackRequest,
    MaintenanceFilter,
    MaintenanceStats,
    MaintenanceStatusUpdate,
)
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.permissions import (
    Principal,
    is_maintenance_staff,
    require_hostel_manager,
    require_maintenance_staff,
    require_role,
)
from hostel_occupancy.services.inventory import bed_operations
from hostel_occupancy.utils.datetime_utils import DateTimeHelper, utc_now

# Bed statuses a new ticket takes offline; occupied and reserved beds keep theirs
OFFLINE_ON_OPEN = (BedStatus.AVAILABLE, BedStatus.MAINTENANCE)

ASSIGNABLE_ROLES = (UserRole.STAFF, UserRole.ADMIN)


class MaintenanceService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.maintenance_repository = MaintenanceRepository(db_session)
        self.hostel_repository = HostelRepository(db_session)
        self.room_repository = RoomRepository(db_session)
        self.student_repository = StudentRepository(db_session)
        self.user_repository = UserRepository(db_session)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_request(self, principal: Principal, data: MaintenanceCreate) -> ServiceResult[MaintenanceRequest]:
        """
        Raise a ticket.

        Residents of the hostel, its manager and staff may raise tickets.
        """

        def unit() -> MaintenanceRequest:
            hostel = self.hostel_repository.get_by_id(data.hostel_id)
            self._require_reporter(principal, hostel)

            now = utc_now()
            request = MaintenanceRequest(
                hostel_id=hostel.id,
                room_id=data.room_id,
                bed_number=data.bed_number,
                bed_offline=False,
                raised_by=principal.user_id,
                category=data.category,
                description=data.description,
                priority=data.priority,
                status=MaintenanceStatus.PENDING,
                status_changed_at=now,
            )

            if data.room_id is not None:
                room = self.room_repository.get_for_update(data.room_id)
                if room.hostel_id != hostel.id:
                    raise ValidationError("Room does not belong to this hostel", field="room_id")
                if data.bed_number is not None:
                    bed = bed_operations.find_bed(room, data.bed_number)
                    if not bed.is_occupied and bed.status in OFFLINE_ON_OPEN:
                        if bed.status == BedStatus.AVAILABLE:
                            bed_operations.set_maintenance(room, bed.bed_number, now)
                            self.room_repository.save(room, now)
                        request.bed_offline = True

            self.maintenance_repository.save(request)
            self._log_operation(
                "create_maintenance_request",
                request.id,
                {"hostel_id": hostel.id, "bed_number": request.bed_number, "bed_offline": request.bed_offline},
            )
            return request

        return self._execute(
            "create maintenance request",
            unit,
            data.hostel_id,
            message="Maintenance request created",
            attempts=self.retry_attempts,
        )

    def update_status(
        self,
        principal: Principal,
        request_id: str,
        data: MaintenanceStatusUpdate,
    ) -> ServiceResult[MaintenanceRequest]:
        def unit() -> MaintenanceRequest:
            request = self.maintenance_repository.get_by_id(request_id)
            require_maintenance_staff(principal, request.hostel, "update maintenance requests")

            now = utc_now()
            if data.status is not None and data.status != request.status:
                self._move(request, data.status, now)
                if data.status == MaintenanceStatus.COMPLETED and data.completion_date is None:
                    request.completion_date = now
            if data.completion_date is not None:
                request.completion_date = DateTimeHelper.to_naive_utc(data.completion_date)
            if data.estimated_cost is not None:
                request.estimated_cost = data.estimated_cost
            if data.actual_cost is not None:
                request.actual_cost = data.actual_cost

            self.maintenance_repository.save(request)
            self._log_operation("update_maintenance_status", request.id, {"status": enum_value(request.status)})
            return request

        return self._execute(
            "update maintenance request",
            unit,
            request_id,
            message="Maintenance request updated",
            attempts=self.retry_attempts,
        )

    def assign(
        self,
        principal: Principal,
        request_id: str,
        data: MaintenanceAssignRequest,
    ) -> ServiceResult[MaintenanceRequest]:
        """Hand an open ticket to a staff member; a pending ticket starts progress."""

        def unit() -> MaintenanceRequest:
            request = self.maintenance_repository.get_by_id(request_id)
            require_hostel_manager(principal, request.hostel, "assign maintenance requests")

            staff = self.user_repository.find_by_id(data.staff_id)
            if staff is None or staff.role not in ASSIGNABLE_ROLES:
                raise ValidationError("Invalid staff member", field="staff_id")

            now = utc_now()
            if request.status != MaintenanceStatus.IN_PROGRESS:
                self._move(request, MaintenanceStatus.IN_PROGRESS, now)
            request.assigned_to = staff.id
            request.assigned_at = now
            if data.estimated_cost is not None:
                request.estimated_cost = data.estimated_cost

            self.maintenance_repository.save(request)
            self._log_operation("assign_maintenance_request", request.id, {"assigned_to": staff.id})
            return request

        return self._execute("assign maintenance request", unit, request_id, message="Maintenance request assigned")

    def add_feedback(
        self,
        principal: Principal,
        request_id: str,
        data: MaintenanceFeedbackRequest,
    ) -> ServiceResult[MaintenanceRequest]:
        def unit() -> MaintenanceRequest:
            request = self.maintenance_repository.get_by_id(request_id)
            if request.raised_by != principal.user_id:
                raise AuthorizationError("Only the requester can add feedback", action="add feedback")
            if request.status != MaintenanceStatus.COMPLETED:
                raise InvalidStateError(
                    "Feedback can only be added to completed requests",
                    current_state=enum_value(request.status),
                )
            if request.feedback_rating is not None:
                raise ConflictError("Feedback was already submitted", details={"request_id": request.id})

            request.feedback_rating = data.rating
            request.feedback_comment = data.comment
            request.feedback_date = utc_now()
            self.maintenance_repository.save(request)
            self._log_operation("add_maintenance_feedback", request.id, {"rating": data.rating})
            return request

        return self._execute("add maintenance feedback", unit, request_id, message="Feedback recorded")

    def delete_request(self, principal: Principal, request_id: str) -> ServiceResult[str]:
        """Remove a ticket (admins only), releasing the bed it held."""

        def unit() -> str:
            require_role(principal, (UserRole.ADMIN,), "delete maintenance requests")
            request = self.maintenance_repository.get_by_id(request_id)
            if request.is_open:
                self._release_bed(request, utc_now())
            self.maintenance_repository.delete(request)
            self._log_operation("delete_maintenance_request", request_id)
            return request_id

        return self._execute(
            "delete maintenance request",
            unit,
            request_id,
            message="Maintenance request deleted",
            attempts=self.retry_attempts,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_request(self, principal: Principal, request_id: str) -> ServiceResult[MaintenanceRequest]:
        def query() -> MaintenanceRequest:
            request = self.maintenance_repository.get_by_id(request_id)
            if request.raised_by != principal.user_id and not is_maintenance_staff(principal, request.hostel):
                raise AuthorizationError("Not authorized to view this request", action="view maintenance request")
            return request

        return self._read("get maintenance request", query, request_id)

    def list_my_requests(self, principal: Principal) -> ServiceResult[List[MaintenanceRequest]]:
        return self._read(
            "list own maintenance requests",
            lambda: self.maintenance_repository.search(raised_by=principal.user_id),
            principal.user_id,
        )

    def list_hostel_requests(
        self,
        principal: Principal,
        hostel_id: str,
        filters: Optional[MaintenanceFilter] = None,
    ) -> ServiceResult[List[MaintenanceRequest]]:
        filters = filters or MaintenanceFilter()

        def query() -> List[MaintenanceRequest]:
            hostel = self.hostel_repository.get_by_id(hostel_id)
            require_maintenance_staff(principal, hostel, "list maintenance requests")
            return self.maintenance_repository.search(
                hostel_id=hostel.id,
                status=enum_value(filters.status) if filters.status else None,
                priority=enum_value(filters.priority) if filters.priority else None,
                category=enum_value(filters.category) if filters.category else None,
            )

        return self._read("list hostel maintenance requests", query, hostel_id)

    def get_stats(self, principal: Principal, hostel_id: str) -> ServiceResult[MaintenanceStats]:
        def query() -> MaintenanceStats:
            hostel = self.hostel_repository.get_by_id(hostel_id)
            require_maintenance_staff(principal, hostel, "view maintenance statistics")
            by_status = self.maintenance_repository.count_by(hostel.id, "status")
            return MaintenanceStats(
                total=sum(by_status.values()),
                by_status=by_status,
                by_priority=self.maintenance_repository.count_by(hostel.id, "priority"),
                by_category=self.maintenance_repository.count_by(hostel.id, "category"),
            )

        return self._read("get maintenance stats", query, hostel_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_reporter(self, principal: Principal, hostel: Hostel) -> None:
        if is_maintenance_staff(principal, hostel):
            return
        if principal.role == UserRole.STUDENT and self.student_repository.find_active_for_user(
            principal.user_id, hostel.id
        ):
            return
        raise AuthorizationError(
            "Only residents, staff or the hostel owner may raise maintenance requests",
            action="create maintenance request",
        )

    def _move(self, request: MaintenanceRequest, target: MaintenanceStatus, now: datetime) -> None:
        ensure_maintenance_transition(request, target)
        request.status = target
        request.status_changed_at = now
        if not request.is_open:
            self._release_bed(request, now)

    def _release_bed(self, request: MaintenanceRequest, now: datetime) -> None:
        """Return the ticket's bed to service unless another open ticket still holds it."""
        if not request.bed_offline or request.room_id is None:
            return
        room = self.room_repository.get_for_update(request.room_id)
        bed = room.get_bed(request.bed_number)
        if bed is None or bed.status != BedStatus.MAINTENANCE:
            return
        if self.maintenance_repository.open_offline_exists(room.id, bed.bed_number, exclude_id=request.id):
            return
        bed_operations.update_bed(room, bed.bed_number, {"status": BedStatus.AVAILABLE}, now)
        self.room_repository.save(room, now)
