"""Hostel repository."""

from typing import List

from sqlalchemy.orm import Session

from hostel_occupancy.models.hostel import Hostel
from hostel_occupancy.repositories.base import BaseRepository


class HostelRepository(BaseRepository[Hostel]):
    def __init__(self, db: Session):
        super().__init__(Hostel, db)

    def find_by_owner(self, owner_id: str) -> List[Hostel]:
        return (
            self.db.query(Hostel)
            .filter(Hostel.owner_id == owner_id)
            .order_by(Hostel.name)
            .all()
        )
