"""
Billing endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from hostel_occupancy.api import deps
from hostel_occupancy.api.responses import dump, dump_many, respond
from hostel_occupancy.schemas.payment import (
    MonthlyBillRequest,
    PaymentCreate,
    PaymentRecordRequest,
    PaymentResponse,
)
from hostel_occupancy.services.common.permissions import Principal
from hostel_occupancy.services.payment import PaymentService

router = APIRouter(tags=["Payment Processing"])


@router.post("/payments", status_code=201)
def create_bill(
    payload: PaymentCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: PaymentService = Depends(deps.get_payment_service),
):
    result = service.create_bill(principal, payload)
    return respond(result, lambda payment: dump(PaymentResponse, payment), status_code=201)


@router.post("/payments/generate")
def generate_monthly_bills(
    payload: MonthlyBillRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: PaymentService = Depends(deps.get_payment_service),
):
    result = service.generate_monthly_bills(principal, payload)
    return respond(result, lambda summary: summary.model_dump(mode="json"))


@router.get("/payments/{payment_id}")
def get_payment(
    payment_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: PaymentService = Depends(deps.get_payment_service),
):
    return respond(service.get_payment(principal, payment_id), lambda payment: dump(PaymentResponse, payment))


@router.post("/payments/{payment_id}/record")
def record_payment(
    payment_id: str,
    payload: PaymentRecordRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: PaymentService = Depends(deps.get_payment_service),
):
    result = service.record_payment(principal, payment_id, payload)
    return respond(result, lambda payment: dump(PaymentResponse, payment))


@router.get("/bookings/{booking_id}/payments")
def list_booking_payments(
    booking_id: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: PaymentService = Depends(deps.get_payment_service),
):
    result = service.list_booking_payments(principal, booking_id)
    return respond(result, lambda payments: dump_many(PaymentResponse, payments))


@router.get("/hostels/{hostel_id}/payments")
def list_hostel_payments(
    hostel_id: str,
    month: Optional[str] = Query(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    principal: Principal = Depends(deps.get_current_principal),
    service: PaymentService = Depends(deps.get_payment_service),
):
    result = service.list_hostel_payments(principal, hostel_id, month)
    return respond(result, lambda payments: dump_many(PaymentResponse, payments))
