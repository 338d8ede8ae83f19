"""
Standard API response envelope.
"""

from typing import Any, Dict, Generic, Optional, TypeVar, Union

from pydantic import Field

from hostel_occupancy.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = ["SuccessResponse", "ErrorBody", "ErrorResponse"]


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response."""

    success: bool = Field(default=True, description="Success flag")
    message: str = Field(..., description="Response message")
    data: Union[T, None] = Field(default=None, description="Response data")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional context")

    @classmethod
    def create(cls, message: str, data: Union[T, None] = None, metadata: Optional[Dict[str, Any]] = None):
        return cls(success=True, message=message, data=data, metadata=metadata or None)


class ErrorBody(BaseSchema):
    """Machine-checkable error kind and context."""

    code: str = Field(..., description="Application error code")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Error context")


class ErrorResponse(BaseSchema):
    """Standard error response."""

    success: bool = Field(default=False, description="Success flag")
    message: str = Field(..., description="Error message")
    error: ErrorBody
