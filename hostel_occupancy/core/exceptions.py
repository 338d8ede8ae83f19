"""
Custom Exceptions for the Hostel Occupancy Service

Domain exceptions raised by repositories and services. Each one carries a
machine-checkable error code and the HTTP status it maps to, so the service
boundary can turn it into a structured failure.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_STATE = "INVALID_STATE"
    UNAUTHORIZED = "UNAUTHORIZED"
    ALREADY_CONVERTED = "ALREADY_CONVERTED"
    DATABASE_ERROR = "DATABASE_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__,
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        details: Dict[str, Any] = {}
        if field:
            details["field"] = field
        if field_errors:
            details["field_errors"] = field_errors
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, 422)
        self.field = field


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, ErrorCode.NOT_FOUND, details, 404)


class ConflictError(BaseAppException):
    """Exception raised when current state already contradicts the request"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFLICT, details, 409)


class ConcurrencyConflictError(ConflictError):
    """Exception raised when a room was modified by a concurrent writer"""

    def __init__(self, message: str = "Resource was modified concurrently, please retry", details=None):
        super().__init__(message, details)


class CapacityExceededError(BaseAppException):
    """Exception raised when a room would hold more beds than its capacity"""

    def __init__(
        self,
        message: str = "Room capacity exceeded",
        capacity: Optional[int] = None,
        requested: Optional[int] = None,
    ):
        details = {"capacity": capacity, "requested": requested}
        super().__init__(message, ErrorCode.CAPACITY_EXCEEDED, details, 409)


class InvalidTransitionError(BaseAppException):
    """Exception raised when a status change violates the lifecycle rules"""

    def __init__(
        self,
        message: str,
        from_status: Optional[str] = None,
        to_status: Optional[str] = None,
    ):
        details = {"from_status": from_status, "to_status": to_status}
        super().__init__(message, ErrorCode.INVALID_TRANSITION, details, 409)


class InvalidStateError(BaseAppException):
    """Exception raised when an operation requires a state the resource is not in"""

    def __init__(self, message: str, current_state: Optional[str] = None):
        details = {"current_state": current_state}
        super().__init__(message, ErrorCode.INVALID_STATE, details, 409)


class AuthorizationError(BaseAppException):
    """Exception raised when the actor lacks the required role or ownership"""

    def __init__(
        self,
        message: str = "Access denied",
        action: Optional[str] = None,
    ):
        details = {"action": action} if action else {}
        super().__init__(message, ErrorCode.UNAUTHORIZED, details, 403)


class AlreadyConvertedError(BaseAppException):
    """Exception raised when a booking already has a linked student record"""

    def __init__(self, booking_id: Optional[str] = None, student_id: Optional[str] = None):
        super().__init__(
            "Booking has already been converted to a student record",
            ErrorCode.ALREADY_CONVERTED,
            {"booking_id": booking_id, "student_id": student_id},
            409,
        )


class RepositoryError(BaseAppException):
    """Exception raised when the persistence layer fails"""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message, ErrorCode.DATABASE_ERROR, {}, 500)


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "ResourceNotFoundError",
    "ConflictError",
    "ConcurrencyConflictError",
    "CapacityExceededError",
    "InvalidTransitionError",
    "InvalidStateError",
    "AuthorizationError",
    "AlreadyConvertedError",
    "RepositoryError",
]
