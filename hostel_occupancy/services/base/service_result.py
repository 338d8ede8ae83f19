"""
Result envelope returned by every service operation.

Services never raise to their callers: domain failures come back as a
failed ServiceResult carrying the error code the HTTP layer maps to a
status.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from hostel_occupancy.core.exceptions import BaseAppException, ErrorCode


class ErrorSeverity(str, Enum):
    # WARNING for rejected business rules, CRITICAL for unexpected failures
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ServiceError:
    """Why an operation failed."""

    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    field: Optional[str] = None


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Outcome of a service operation.

    Attributes:
        is_success: Whether the operation committed
        data: The affected entity or a mapping of them (if successful)
        error: Error information (if failed)
        message: Human-readable status message
        metadata: Extra context, e.g. a conversion step that was skipped
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message, metadata=metadata or {})

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def from_app_exception(
        cls,
        exception: BaseAppException,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
    ) -> "ServiceResult[TData]":
        """Failed result keeping a domain exception's code, message and details."""
        details = dict(exception.details or {})
        return cls.failure(
            ServiceError(
                code=exception.error_code,
                message=exception.message,
                severity=severity,
                details=details,
                field=details.get("field"),
            )
        )

    def __repr__(self) -> str:
        if self.is_success:
            return f"ServiceResult(Success: {self.message})"
        return f"ServiceResult(Failure: {self.error.code.value} {self.message})"


__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
