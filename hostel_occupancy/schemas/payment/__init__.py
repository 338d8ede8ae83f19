from hostel_occupancy.schemas.payment.payment_base import (
    ChargeItem,
    MonthlyBillRequest,
    MonthlyBillSummary,
    PaymentCreate,
    PaymentRecordRequest,
    PaymentResponse,
)

__all__ = [
    "ChargeItem",
    "MonthlyBillRequest",
    "MonthlyBillSummary",
    "PaymentCreate",
    "PaymentRecordRequest",
    "PaymentResponse",
]
