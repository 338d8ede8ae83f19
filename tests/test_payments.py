"""
Tests for monthly bills.
"""

import logging
from datetime import timedelta
from decimal import Decimal

import pytest

from hostel_occupancy.core.exceptions import ErrorCode
from hostel_occupancy.models.base.enums import PaymentMethod, PaymentStatus
from hostel_occupancy.schemas.payment import (
    ChargeItem,
    MonthlyBillRequest,
    PaymentCreate,
    PaymentRecordRequest,
)
from hostel_occupancy.services.payment import PaymentService
from hostel_occupancy.utils.datetime_utils import utc_now


@pytest.fixture
def payment_service(db):
    return PaymentService(db)


@pytest.fixture
def billing_month(confirmed_booking):
    """The month the fixture booking starts in."""
    return confirmed_booking.check_in_date.strftime("%Y-%m")


def bill_request(booking, month, **overrides):
    fields = dict(
        booking_id=booking.id,
        month=month,
        due_date=utc_now() + timedelta(days=30),
        additional_charges=[ChargeItem(description="Laundry", amount=Decimal("200"))],
        discounts=[ChargeItem(description="Early payment", amount=Decimal("100"))],
    )
    fields.update(overrides)
    return PaymentCreate(**fields)


@pytest.fixture
def bill(payment_service, confirmed_booking, billing_month, owner_principal):
    result = payment_service.create_bill(owner_principal, bill_request(confirmed_booking, billing_month))
    assert result.is_success, result.error
    return result.data


class TestCreateBill:
    """Creating one bill for one booking and month."""

    def test_total_is_derived(self, bill, confirmed_booking):
        """Rent plus charges minus discounts; nothing paid yet."""
        assert bill.rent_amount == Decimal("3000")
        assert bill.total_amount == Decimal("3100")
        assert bill.payment_status == PaymentStatus.PENDING
        assert bill.user_id == confirmed_booking.user_id

    def test_past_due_bill_is_overdue(self, payment_service, confirmed_booking, billing_month, owner_principal):
        """An unpaid bill past its due date is overdue from the start."""
        result = payment_service.create_bill(
            owner_principal,
            bill_request(confirmed_booking, billing_month, due_date=utc_now() - timedelta(days=1)),
        )

        assert result.data.payment_status == PaymentStatus.OVERDUE

    def test_one_bill_per_month(self, payment_service, bill, confirmed_booking, billing_month, owner_principal):
        """A second bill for the same month conflicts."""
        result = payment_service.create_bill(owner_principal, bill_request(confirmed_booking, billing_month))

        assert result.error.code == ErrorCode.CONFLICT
        assert result.error.details["payment_id"] == bill.id

    def test_cancelled_booking_not_billable(self, payment_service, booking_service, make_booking, owner_principal):
        """Cancelled bookings never get bills."""
        booking = make_booking()
        booking_service.cancel_booking(owner_principal, booking.id)

        result = payment_service.create_bill(owner_principal, bill_request(booking, "2026-11"))

        assert result.error.code == ErrorCode.INVALID_STATE

    def test_discounts_cannot_exceed_total(self, payment_service, confirmed_booking, billing_month, owner_principal):
        """A negative total is rejected and nothing is stored."""
        result = payment_service.create_bill(
            owner_principal,
            bill_request(
                confirmed_booking,
                billing_month,
                discounts=[ChargeItem(description="Scholarship", amount=Decimal("5000"))],
            ),
        )

        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.field == "discounts"
        listed = payment_service.list_booking_payments(owner_principal, confirmed_booking.id).data
        assert listed == []

    def test_guest_cannot_bill(self, payment_service, confirmed_booking, billing_month, student_principal):
        result = payment_service.create_bill(student_principal, bill_request(confirmed_booking, billing_month))

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_month_format_is_checked(self, confirmed_booking):
        with pytest.raises(ValueError):
            bill_request(confirmed_booking, "2026-13")


class TestRecordPayment:
    """Payments against a bill."""

    def test_partial_then_full(self, payment_service, bill, owner_principal):
        """Status follows the paid amount."""
        partial = payment_service.record_payment(
            owner_principal,
            bill.id,
            PaymentRecordRequest(amount=Decimal("1000"), payment_method=PaymentMethod.UPI, transaction_id="UPI-1"),
        )
        assert partial.data.payment_status == PaymentStatus.PARTIAL
        assert partial.data.paid_date is not None

        full = payment_service.record_payment(
            owner_principal,
            bill.id,
            PaymentRecordRequest(amount=Decimal("2100"), payment_method=PaymentMethod.CASH),
        )
        assert full.data.payment_status == PaymentStatus.PAID
        assert full.data.amount_paid == Decimal("3100")
        assert full.data.transaction_id == "UPI-1"

    def test_paid_bill_rejects_more(self, payment_service, bill, owner_principal):
        """A bill paid in full takes no further payments."""
        request = PaymentRecordRequest(amount=Decimal("3100"), payment_method=PaymentMethod.CARD)
        payment_service.record_payment(owner_principal, bill.id, request)

        result = payment_service.record_payment(owner_principal, bill.id, request)

        assert result.error.code == ErrorCode.CONFLICT


class TestMonthlyBills:
    """Bulk billing of a hostel."""

    def test_generate_skips_already_billed(self, payment_service, bill, hostel, billing_month, owner_principal):
        """Existing bills are left alone."""
        result = payment_service.generate_monthly_bills(
            owner_principal,
            MonthlyBillRequest(hostel_id=hostel.id, month=billing_month),
        )

        assert result.data.created == 0
        assert result.data.skipped == 1

    def test_generate_bills_active_bookings(
        self, payment_service, confirmed_booking, make_booking, other_student, hostel, billing_month, owner_principal
    ):
        """Only confirmed or checked-in bookings whose stay overlaps the month are billed."""
        make_booking(principal=owner_principal, bed_number="B", user_id=other_student.id)

        result = payment_service.generate_monthly_bills(
            owner_principal,
            MonthlyBillRequest(hostel_id=hostel.id, month=billing_month),
        )

        assert result.data.created == 1
        bills = payment_service.list_hostel_payments(owner_principal, hostel.id, billing_month).data
        assert [b.booking_id for b in bills] == [confirmed_booking.id]
        assert bills[0].total_amount == Decimal("3000")

    def test_month_outside_stay_is_skipped(self, payment_service, confirmed_booking, hostel, owner_principal):
        """A month after the stay ends produces no bill."""
        after_stay = (confirmed_booking.check_out_date + timedelta(days=62)).strftime("%Y-%m")

        result = payment_service.generate_monthly_bills(
            owner_principal,
            MonthlyBillRequest(hostel_id=hostel.id, month=after_stay),
        )

        assert result.data.created == 0
        assert result.data.skipped == 1

    def test_generation_is_logged_at_info(
        self, payment_service, confirmed_booking, hostel, billing_month, owner_principal, caplog
    ):
        """The completion record carries the counts without clobbering LogRecord fields."""
        caplog.set_level(logging.INFO)

        result = payment_service.generate_monthly_bills(
            owner_principal,
            MonthlyBillRequest(hostel_id=hostel.id, month=billing_month),
        )

        assert result.is_success, result.error
        record = next(r for r in caplog.records if r.getMessage() == "generate_monthly_bills completed")
        assert record.bills_created == 1
        assert record.bills_skipped == 0


def test_logged_details_never_overwrite_record_attributes(payment_service, caplog):
    caplog.set_level(logging.INFO)

    payment_service._log_operation("tag_bills", "ref-1", {"created": 3, "name": "x", "month": "2026-11"})

    record = caplog.records[-1]
    assert record.detail_created == 3
    assert record.detail_name == "x"
    assert record.month == "2026-11"
    assert record.name == "PaymentService"


class TestQueries:
    def test_guest_sees_own_bills(self, payment_service, bill, confirmed_booking, student_principal):
        result = payment_service.list_booking_payments(student_principal, confirmed_booking.id)

        assert [b.id for b in result.data] == [bill.id]
        assert payment_service.get_payment(student_principal, bill.id).data.id == bill.id

    def test_stranger_cannot_see_bills(self, payment_service, bill, other_student_principal):
        result = payment_service.get_payment(other_student_principal, bill.id)

        assert result.error.code == ErrorCode.UNAUTHORIZED

    def test_hostel_bills_need_manager(self, payment_service, bill, hostel, student_principal):
        result = payment_service.list_hostel_payments(student_principal, hostel.id)

        assert result.error.code == ErrorCode.UNAUTHORIZED
