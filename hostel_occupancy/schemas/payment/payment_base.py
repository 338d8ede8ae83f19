"""
Monthly bill schemas.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from hostel_occupancy.models.base.enums import PaymentMethod, PaymentStatus
from hostel_occupancy.schemas.common.base import BaseCreateSchema, BaseDBSchema, BaseSchema

__all__ = [
    "ChargeItem",
    "PaymentCreate",
    "PaymentRecordRequest",
    "MonthlyBillRequest",
    "MonthlyBillSummary",
    "PaymentResponse",
]

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def _validate_month(value: str) -> str:
    if not MONTH_PATTERN.match(value):
        raise ValueError("Month must be in YYYY-MM format")
    return value


class ChargeItem(BaseSchema):
    description: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., ge=0)


class PaymentCreate(BaseCreateSchema):
    booking_id: str
    month: str = Field(..., examples=["2026-11"])
    due_date: datetime
    rent_amount: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Defaults to the booking's monthly rent",
    )
    late_fee: Decimal = Field(default=Decimal("0"), ge=0)
    additional_charges: List[ChargeItem] = Field(default_factory=list)
    discounts: List[ChargeItem] = Field(default_factory=list)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _validate_month(v)


class PaymentRecordRequest(BaseSchema):
    amount: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=1000)


class MonthlyBillRequest(BaseSchema):
    hostel_id: str
    month: str
    due_date: Optional[datetime] = Field(
        default=None,
        description="Defaults to the configured due day of the billing month",
    )

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _validate_month(v)


class MonthlyBillSummary(BaseSchema):
    month: str
    created: int
    skipped: int


class PaymentResponse(BaseDBSchema):
    booking_id: str
    user_id: str
    hostel_id: str
    month: str
    due_date: datetime
    paid_date: Optional[datetime] = None
    rent_amount: Decimal
    late_fee: Decimal
    additional_charges: List[ChargeItem] = Field(default_factory=list)
    discounts: List[ChargeItem] = Field(default_factory=list)
    total_amount: Decimal
    amount_paid: Decimal
    payment_status: PaymentStatus
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
