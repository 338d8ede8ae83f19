"""Maintenance ticket repository."""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hostel_occupancy.models.base.enums import enum_value
from hostel_occupancy.models.maintenance import OPEN_MAINTENANCE_STATUSES, MaintenanceRequest
from hostel_occupancy.repositories.base import BaseRepository


class MaintenanceRepository(BaseRepository[MaintenanceRequest]):
    def __init__(self, db: Session):
        super().__init__(MaintenanceRequest, db)

    def save(self, request: MaintenanceRequest) -> MaintenanceRequest:
        self.db.add(request)
        self.flush()
        return request

    def search(
        self,
        hostel_id: Optional[str] = None,
        raised_by: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[MaintenanceRequest]:
        query = self.db.query(MaintenanceRequest)
        if hostel_id is not None:
            query = query.filter(MaintenanceRequest.hostel_id == hostel_id)
        if raised_by is not None:
            query = query.filter(MaintenanceRequest.raised_by == raised_by)
        if status:
            query = query.filter(MaintenanceRequest.status == status)
        if priority:
            query = query.filter(MaintenanceRequest.priority == priority)
        if category:
            query = query.filter(MaintenanceRequest.category == category)
        return query.order_by(MaintenanceRequest.created_at.desc()).all()

    def list_for_bed(self, room_id: str, bed_number: str) -> List[MaintenanceRequest]:
        return (
            self.db.query(MaintenanceRequest)
            .filter(MaintenanceRequest.room_id == room_id, MaintenanceRequest.bed_number == bed_number)
            .order_by(MaintenanceRequest.created_at.desc())
            .all()
        )

    def open_offline_exists(self, room_id: str, bed_number: str, exclude_id: Optional[str] = None) -> bool:
        """Whether an open ticket keeps the bed offline."""
        query = self.db.query(MaintenanceRequest.id).filter(
            MaintenanceRequest.room_id == room_id,
            MaintenanceRequest.bed_number == bed_number,
            MaintenanceRequest.bed_offline.is_(True),
            MaintenanceRequest.status.in_(OPEN_MAINTENANCE_STATUSES),
        )
        if exclude_id is not None:
            query = query.filter(MaintenanceRequest.id != exclude_id)
        return query.first() is not None

    def count_by(self, hostel_id: str, column_name: str) -> Dict[str, int]:
        column = getattr(MaintenanceRequest, column_name)
        rows = (
            self.db.query(column, func.count(MaintenanceRequest.id))
            .filter(MaintenanceRequest.hostel_id == hostel_id)
            .group_by(column)
            .all()
        )
        return {enum_value(value): count for value, count in rows}
