"""Service layer foundation."""

from hostel_occupancy.services.base.base_service import BaseService
from hostel_occupancy.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)
from hostel_occupancy.services.base.transaction_manager import (
    TransactionContext,
    TransactionManager,
)

__all__ = [
    "BaseService",
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
    "TransactionContext",
    "TransactionManager",
]
