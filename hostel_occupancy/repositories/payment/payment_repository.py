"""Payment repository."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.models.payment import Payment, recompute_payment
from hostel_occupancy.repositories.base import BaseRepository
from hostel_occupancy.utils.datetime_utils import utc_now


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(Payment, db)

    def save(self, payment: Payment, now: Optional[datetime] = None) -> Payment:
        """Persist a bill, re-deriving total and status."""
        recompute_payment(payment, now or utc_now())
        self.db.add(payment)
        self.flush()
        return payment

    def find_by_booking_month(self, booking_id: str, month: str) -> Optional[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.booking_id == booking_id, Payment.month == month)
            .first()
        )

    def list_by_booking(self, booking_id: str) -> List[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.booking_id == booking_id)
            .order_by(Payment.month)
            .all()
        )

    def list_by_hostel(self, hostel_id: str, month: Optional[str] = None) -> List[Payment]:
        query = self.db.query(Payment).filter(Payment.hostel_id == hostel_id)
        if month:
            query = query.filter(Payment.month == month)
        return query.order_by(Payment.month, Payment.created_at).all()
