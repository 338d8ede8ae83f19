"""
Monthly billing for bookings.

Totals and statuses are derived by ``recompute_payment`` whenever a bill is
persisted; this service only records the inputs.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.core.config import settings
from hostel_occupancy.core.exceptions import ConflictError, InvalidStateError, ValidationError
from hostel_occupancy.models.base.enums import BookingStatus, PaymentStatus, enum_value
from hostel_occupancy.models.booking import Booking
from hostel_occupancy.models.payment import Payment
from hostel_occupancy.repositories.booking import BookingRepository
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.payment import PaymentRepository
from hostel_occupancy.schemas.payment import (
    MonthlyBillRequest,
    MonthlyBillSummary,
    PaymentCreate,
    PaymentRecordRequest,
)
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.permissions import (
    Principal,
    require_booking_party,
    require_hostel_manager,
)
from hostel_occupancy.utils.datetime_utils import DateTimeHelper, utc_now

UNBILLABLE_STATUSES = (BookingStatus.CANCELLED, BookingStatus.NO_SHOW)


class PaymentService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.payment_repository = PaymentRepository(db_session)
        self.booking_repository = BookingRepository(db_session)
        self.hostel_repository = HostelRepository(db_session)

    def create_bill(self, principal: Principal, data: PaymentCreate) -> ServiceResult[Payment]:
        """Create the bill of one booking for one month."""

        def unit() -> Payment:
            booking = self.booking_repository.get_by_id(data.booking_id)
            require_hostel_manager(principal, booking.hostel, "create bills")
            if booking.status in UNBILLABLE_STATUSES:
                raise InvalidStateError(
                    "Cannot bill a booking that never started",
                    current_state=enum_value(booking.status),
                )
            self._ensure_unbilled(booking.id, data.month)

            payment = Payment(
                booking_id=booking.id,
                user_id=booking.user_id,
                hostel_id=booking.hostel_id,
                month=data.month,
                due_date=DateTimeHelper.to_naive_utc(data.due_date),
                rent_amount=data.rent_amount if data.rent_amount is not None else booking.rent_amount,
                late_fee=data.late_fee,
                additional_charges=[item.model_dump(mode="json") for item in data.additional_charges],
                discounts=[item.model_dump(mode="json") for item in data.discounts],
                amount_paid=0,
                notes=data.notes,
                created_by=principal.user_id,
            )
            self.payment_repository.save(payment)
            if payment.total_amount < 0:
                raise ValidationError("Discounts cannot exceed the bill total", field="discounts")

            self._log_operation(
                "create_bill",
                payment.id,
                {"booking_id": booking.id, "month": payment.month, "total_amount": str(payment.total_amount)},
            )
            return payment

        return self._execute("create bill", unit, data.booking_id, message="Bill created successfully")

    def record_payment(
        self,
        principal: Principal,
        payment_id: str,
        data: PaymentRecordRequest,
    ) -> ServiceResult[Payment]:
        def unit() -> Payment:
            payment = self.payment_repository.get_by_id(payment_id)
            require_hostel_manager(
                principal,
                self.hostel_repository.get_by_id(payment.hostel_id),
                "record payments",
            )
            if payment.payment_status == PaymentStatus.PAID:
                raise ConflictError("Bill is already paid in full", details={"payment_id": payment.id})

            now = utc_now()
            payment.amount_paid = payment.amount_paid + data.amount
            payment.paid_date = now
            payment.payment_method = data.payment_method
            if data.transaction_id:
                payment.transaction_id = data.transaction_id
            if data.notes:
                payment.notes = data.notes
            self.payment_repository.save(payment, now)

            self._log_operation(
                "record_payment",
                payment.id,
                {"amount": str(data.amount), "payment_status": payment.payment_status},
            )
            return payment

        return self._execute("record payment", unit, payment_id, message="Payment recorded successfully")

    def generate_monthly_bills(
        self,
        principal: Principal,
        data: MonthlyBillRequest,
    ) -> ServiceResult[MonthlyBillSummary]:
        """
        Bill every confirmed or checked-in booking of a hostel for one month.

        Bookings already billed for the month, or whose stay does not overlap
        it, are skipped.
        """

        def unit() -> MonthlyBillSummary:
            hostel = self.hostel_repository.get_by_id(data.hostel_id)
            require_hostel_manager(principal, hostel, "generate bills")

            month_start = datetime.combine(DateTimeHelper.parse_month(data.month), datetime.min.time())
            month_end = DateTimeHelper.add_months(month_start, 1)
            due_date = DateTimeHelper.to_naive_utc(data.due_date) or month_start.replace(
                day=settings.occupancy.DEFAULT_DUE_DAY
            )

            created = skipped = 0
            now = utc_now()
            for booking in self.booking_repository.list_billable(hostel.id):
                if not self._stay_overlaps(booking, month_start, month_end):
                    skipped += 1
                    continue
                if self.payment_repository.find_by_booking_month(booking.id, data.month) is not None:
                    skipped += 1
                    continue
                self.payment_repository.save(
                    Payment(
                        booking_id=booking.id,
                        user_id=booking.user_id,
                        hostel_id=booking.hostel_id,
                        month=data.month,
                        due_date=due_date,
                        rent_amount=booking.rent_amount,
                        late_fee=0,
                        additional_charges=[],
                        discounts=[],
                        amount_paid=0,
                        created_by=principal.user_id,
                    ),
                    now,
                )
                created += 1

            self._log_operation(
                "generate_monthly_bills",
                hostel.id,
                {"month": data.month, "bills_created": created, "bills_skipped": skipped},
            )
            return MonthlyBillSummary(month=data.month, created=created, skipped=skipped)

        return self._execute("generate monthly bills", unit, data.hostel_id, message="Monthly bills generated")

    def get_payment(self, principal: Principal, payment_id: str) -> ServiceResult[Payment]:
        def query() -> Payment:
            payment = self.payment_repository.get_by_id(payment_id)
            require_booking_party(principal, payment.booking, payment.booking.hostel, "view this bill")
            return payment

        return self._read("get payment", query, payment_id)

    def list_booking_payments(self, principal: Principal, booking_id: str) -> ServiceResult[List[Payment]]:
        def query() -> List[Payment]:
            booking = self.booking_repository.get_by_id(booking_id)
            require_booking_party(principal, booking, booking.hostel, "view bills of this booking")
            return self.payment_repository.list_by_booking(booking.id)

        return self._read("list booking payments", query, booking_id)

    def list_hostel_payments(
        self,
        principal: Principal,
        hostel_id: str,
        month: Optional[str] = None,
    ) -> ServiceResult[List[Payment]]:
        def query() -> List[Payment]:
            hostel = self.hostel_repository.get_by_id(hostel_id)
            require_hostel_manager(principal, hostel, "list hostel bills")
            return self.payment_repository.list_by_hostel(hostel.id, month)

        return self._read("list hostel payments", query, hostel_id)

    def _ensure_unbilled(self, booking_id: str, month: str) -> None:
        existing = self.payment_repository.find_by_booking_month(booking_id, month)
        if existing is not None:
            raise ConflictError(
                f"Booking is already billed for {month}",
                details={"payment_id": existing.id, "month": month},
            )

    @staticmethod
    def _stay_overlaps(booking: Booking, month_start: datetime, month_end: datetime) -> bool:
        return booking.check_in_date < month_end and booking.check_out_date > month_start
