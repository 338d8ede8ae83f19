"""
Base service class providing common functionality for all services.
"""

import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from sqlalchemy.orm import Session

from hostel_occupancy.core.config import settings
from hostel_occupancy.core.exceptions import BaseAppException, ErrorCode
from hostel_occupancy.core.logging import get_logger
from hostel_occupancy.services.base.service_result import (
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)
from hostel_occupancy.services.base.transaction_manager import TransactionManager

T = TypeVar("T")

# LogRecord attributes that `extra` may not overwrite
_RESERVED_LOG_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Consistent error handling via ServiceResult
    - Transaction management utilities
    """

    def __init__(self, db_session: Session):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
        """
        self.db: Session = db_session
        self.transaction_manager = TransactionManager(db_session)
        self._logger = get_logger(self.__class__.__name__)

    @property
    def retry_attempts(self) -> int:
        """Attempts for a unit that touches a room and may lose a version race."""
        return settings.occupancy.OCCUPANCY_RETRY_ATTEMPTS

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure.

        Domain exceptions keep their code and message. Anything else is
        reported as INTERNAL_ERROR with a generic message and logged with
        its traceback.
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        if isinstance(exception, BaseAppException):
            self._logger.warning(
                f"{operation} rejected: {exception.message}",
                extra={**context, "error_code": exception.error_code.value},
            )
            return ServiceResult.from_app_exception(exception)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )
        return ServiceResult.failure(
            ServiceError(
                code=ErrorCode.INTERNAL_ERROR,
                message=f"Failed to {operation}",
                details={"entity_ref": context["entity_ref"]},
                severity=ErrorSeverity.CRITICAL,
            )
        )

    def _execute(
        self,
        operation: str,
        unit: Callable[[], T],
        entity_ref: Optional[Any] = None,
        message: Optional[str] = None,
        attempts: int = 1,
    ) -> ServiceResult[T]:
        """
        Run ``unit`` atomically and wrap its return value in a ServiceResult.

        If ``unit`` returns a ServiceResult it is passed through unchanged.
        """
        try:
            data = self.transaction_manager.run(unit, attempts=attempts)
        except Exception as e:
            return self._handle_exception(e, operation, entity_ref)

        if isinstance(data, ServiceResult):
            return data
        return ServiceResult.success(data, message=message)

    def _read(
        self,
        operation: str,
        query: Callable[[], T],
        entity_ref: Optional[Any] = None,
    ) -> ServiceResult[T]:
        """Run a read-only query and wrap its result."""
        try:
            return ServiceResult.success(query())
        except Exception as e:
            return self._handle_exception(e, operation, entity_ref)

    def _log_operation(
        self,
        operation: str,
        entity_ref: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log a completed state change."""
        extra = {"operation": operation}
        if entity_ref is not None:
            extra["entity_ref"] = str(entity_ref)
        for key, value in (details or {}).items():
            extra[f"detail_{key}" if key in _RESERVED_LOG_KEYS else key] = value
        self._logger.info(f"{operation} completed", extra=extra)
