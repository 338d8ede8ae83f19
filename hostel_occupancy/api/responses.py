"""
Translate service results into the standard response envelope.
"""

from typing import Any, Callable, Dict, Iterable, Optional, Type

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from hostel_occupancy.core.exceptions import BaseAppException, ErrorCode
from hostel_occupancy.schemas.common.response import ErrorBody, ErrorResponse, SuccessResponse
from hostel_occupancy.services.base import ServiceResult

# HTTP status per application error code
STATUS_BY_ERROR_CODE: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.CAPACITY_EXCEEDED: 409,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.ALREADY_CONVERTED: 409,
    ErrorCode.UNAUTHORIZED: 403,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


def dump(schema: Type[BaseModel], value: Any) -> Optional[Dict[str, Any]]:
    """Serialize one ORM object or mapping through a response schema."""
    if value is None:
        return None
    return schema.model_validate(value).model_dump(mode="json")


def dump_many(schema: Type[BaseModel], values: Iterable[Any]) -> list:
    return [dump(schema, value) for value in values]


def error_response(
    code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, error=ErrorBody(code=code.value, details=details or None))
    return JSONResponse(
        status_code=status_code or STATUS_BY_ERROR_CODE.get(code, 500),
        content=body.model_dump(mode="json"),
    )


def exception_response(exc: BaseAppException) -> JSONResponse:
    return error_response(exc.error_code, exc.message, exc.details, exc.status_code)


def respond(
    result: ServiceResult,
    serializer: Optional[Callable[[Any], Any]] = None,
    status_code: int = 200,
) -> JSONResponse:
    """
    Render a ServiceResult.

    ``serializer`` turns successful data into JSON-ready values; failures
    use the status mapped from their error code.
    """
    if not result.is_success:
        error = result.error
        return error_response(error.code, error.message, error.details)

    data = serializer(result.data) if serializer else result.data
    body = SuccessResponse.create(result.message or "Success", data, result.metadata)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


__all__ = [
    "STATUS_BY_ERROR_CODE",
    "dump",
    "dump_many",
    "error_response",
    "exception_response",
    "respond",
]
