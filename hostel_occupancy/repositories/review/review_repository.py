"""Review repository."""

from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from hostel_occupancy.models.review import Review
from hostel_occupancy.repositories.base import BaseRepository


class ReviewRepository(BaseRepository[Review]):
    def __init__(self, db: Session):
        super().__init__(Review, db)

    def find_by_booking(self, booking_id: str) -> Optional[Review]:
        return self.db.query(Review).filter(Review.booking_id == booking_id).first()

    def rating_aggregate(self, hostel_id: str) -> Tuple[Optional[Decimal], int]:
        """Average rating and review count for a hostel."""
        average, count = (
            self.db.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.hostel_id == hostel_id)
            .one()
        )
        return (Decimal(str(average)) if average is not None else None), int(count or 0)
