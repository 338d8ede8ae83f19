from hostel_occupancy.services.common.permissions import (
    Principal,
    is_booking_party,
    is_hostel_manager,
    require_booking_party,
    require_hostel_manager,
    require_role,
    role_in,
)
from hostel_occupancy.services.common.pricing import (
    FinancialSnapshot,
    Refund,
    compute_financial_snapshot,
    compute_pending_amount,
    compute_refund,
)

__all__ = [
    "Principal",
    "is_booking_party",
    "is_hostel_manager",
    "require_booking_party",
    "require_hostel_manager",
    "require_role",
    "role_in",
    "FinancialSnapshot",
    "Refund",
    "compute_financial_snapshot",
    "compute_pending_amount",
    "compute_refund",
]
