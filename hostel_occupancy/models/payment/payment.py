"""
Monthly bill for a booking.

``total_amount`` and ``payment_status`` are derived and rewritten by
``recompute_payment`` before every persist.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, JSON, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_occupancy.models.base.base_model import TimestampModel
from hostel_occupancy.models.base.enums import PaymentMethod, PaymentStatus

__all__ = ["Payment", "recompute_payment"]


class Payment(TimestampModel):
    """One bill per booking per month."""

    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint("booking_id", "month", name="uq_payment_booking_month"),
    )

    booking_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hostel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Billing month, YYYY-MM
    month: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    late_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    # [{"description": str, "amount": str}]
    additional_charges: Mapped[List[Dict]] = mapped_column(JSON, nullable=False, default=list)
    discounts: Mapped[List[Dict]] = mapped_column(JSON, nullable=False, default=list)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    payment_status: Mapped[PaymentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )

    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(String(20), nullable=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment(booking_id={self.booking_id}, month={self.month}, status={self.payment_status})>"


def _sum_amounts(items: Optional[List[Dict]]) -> Decimal:
    return sum((Decimal(str(item.get("amount", 0))) for item in items or []), Decimal("0"))


def recompute_payment(payment: Payment, now: datetime) -> Payment:
    """Re-derive total and status from the bill's components."""
    payment.total_amount = (
        Decimal(payment.rent_amount)
        + Decimal(payment.late_fee or 0)
        + _sum_amounts(payment.additional_charges)
        - _sum_amounts(payment.discounts)
    )

    paid = Decimal(payment.amount_paid or 0)
    if paid >= payment.total_amount:
        payment.payment_status = PaymentStatus.PAID
    elif paid > 0:
        payment.payment_status = PaymentStatus.PARTIAL
    elif payment.due_date is not None and now > payment.due_date:
        payment.payment_status = PaymentStatus.OVERDUE
    else:
        payment.payment_status = PaymentStatus.PENDING
    return payment
