"""
Booking money rules.

The snapshot is computed once at creation; afterwards only recorded
payments move the pending amount.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

Number = Union[Decimal, int, str]

TWO_PLACES = Decimal("0.01")


def _money(value: Optional[Number]) -> Decimal:
    return Decimal(str(value or 0)).quantize(TWO_PLACES)


@dataclass(frozen=True)
class FinancialSnapshot:
    rent_amount: Decimal
    security_deposit: Decimal
    total_amount: Decimal
    pending_amount: Decimal


@dataclass(frozen=True)
class Refund:
    security_deposit: Decimal
    damages: Decimal
    refund_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "security_deposit": self.security_deposit,
            "damages": self.damages,
            "refund_amount": self.refund_amount,
        }


def compute_pending_amount(
    total_amount: Number,
    security_deposit: Number,
    advance_paid: Number = 0,
    deposit_paid_amount: Number = 0,
) -> Decimal:
    return _money(total_amount) + _money(security_deposit) - (_money(advance_paid) + _money(deposit_paid_amount))


def compute_financial_snapshot(
    monthly_rent: Number,
    duration_months: int,
    advance_paid: Number = 0,
    deposit_paid_amount: Number = 0,
) -> FinancialSnapshot:
    """
    Rent times months, one month's rent as deposit, less whatever was paid up front.

    >>> compute_financial_snapshot(3000, 6).pending_amount
    Decimal('21000.00')
    """
    rent = _money(monthly_rent)
    total = (rent * duration_months).quantize(TWO_PLACES)
    deposit = rent
    return FinancialSnapshot(
        rent_amount=rent,
        security_deposit=deposit,
        total_amount=total,
        pending_amount=compute_pending_amount(total, deposit, advance_paid, deposit_paid_amount),
    )


def compute_refund(
    security_deposit: Number,
    damages: Number = 0,
    refund_cap: Optional[Number] = None,
) -> Refund:
    """Deposit less damages, never negative, optionally capped by the requested amount."""
    deposit = _money(security_deposit)
    damage = _money(damages)
    refund = max(deposit - damage, Decimal("0.00"))
    if refund_cap is not None:
        refund = min(refund, _money(refund_cap))
    return Refund(security_deposit=deposit, damages=damage, refund_amount=refund)
