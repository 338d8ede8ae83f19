"""
Service layer root package.

Each subpackage implements application use-cases on top of:

- SQLAlchemy models (hostel_occupancy.models.*)
- Repositories (hostel_occupancy.repositories.*)
- Pydantic schemas (hostel_occupancy.schemas.*)
- Common service infrastructure (hostel_occupancy.services.base, .common)

Typical pattern for a service:

    class SomeService(BaseService):
        def some_use_case(self, principal, ...):
            def unit():
                ...  # load, check, mutate, save through repositories
            return self._execute("some use case", unit, entity_ref)
"""

from hostel_occupancy.services.base import BaseService, ServiceResult, TransactionManager
from hostel_occupancy.services.common import Principal

__all__ = [
    "BaseService",
    "ServiceResult",
    "TransactionManager",
    "Principal",
]
