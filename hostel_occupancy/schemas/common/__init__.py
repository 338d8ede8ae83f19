from hostel_occupancy.schemas.common.base import (
    BaseCreateSchema,
    BaseDBSchema,
    BaseFilterSchema,
    BaseSchema,
    BaseUpdateSchema,
)
from hostel_occupancy.schemas.common.response import ErrorBody, ErrorResponse, SuccessResponse

__all__ = [
    "BaseCreateSchema",
    "BaseDBSchema",
    "BaseFilterSchema",
    "BaseSchema",
    "BaseUpdateSchema",
    "ErrorBody",
    "ErrorResponse",
    "SuccessResponse",
]
