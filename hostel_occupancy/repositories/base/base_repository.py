"""
Base repository with standardized CRUD operations and error translation.

Repositories never commit: they flush inside the unit of work opened by
the service layer, which owns commit and rollback.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from hostel_occupancy.core.exceptions import (
    ConcurrencyConflictError,
    ConflictError,
    RepositoryError,
    ResourceNotFoundError,
)
from hostel_occupancy.core.logging import get_logger
from hostel_occupancy.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Repository over a single model class.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Write Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add a new entity and flush it.

        Raises:
            ConflictError: If a unique constraint rejects the row
        """
        self.db.add(entity)
        self.flush()
        logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        self.flush()
        logger.debug(f"Deleted {self.model.__name__} with id: {entity.id}")

    def flush(self) -> None:
        """
        Flush pending changes, translating driver errors to domain errors.
        """
        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConcurrencyConflictError(
                f"{self.model.__name__} was modified concurrently, please retry"
            ) from e
        except IntegrityError as e:
            raise ConflictError(
                f"{self.model.__name__} conflicts with an existing record",
                details={"constraint": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Flush failed: {e}") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: str) -> Optional[ModelType]:
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {e}") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if entity is None:
            raise ResourceNotFoundError(self.model.__name__, id)
        return entity

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        skip: int = 0,
        limit: Optional[int] = 100,
        order_by: Optional[List[str]] = None,
    ) -> List[ModelType]:
        """
        Find entities matching criteria.

        Args:
            criteria: Filter criteria as key-value pairs (list values use IN)
            skip: Number of records to skip
            limit: Maximum number of records (None for all)
            order_by: Fields to order by (prefix with - for desc)
        """
        try:
            query = self.db.query(self.model)

            for key, value in criteria.items():
                if value is None or not hasattr(self.model, key):
                    continue
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple, set, frozenset)):
                    query = query.filter(column.in_(list(value)))
                else:
                    query = query.filter(column == value)

            for field in order_by or []:
                if field.startswith("-"):
                    query = query.order_by(getattr(self.model, field[1:]).desc())
                else:
                    query = query.order_by(getattr(self.model, field))

            query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {e}") from e

    def count(self, criteria: Optional[Dict[str, Any]] = None) -> int:
        query = self.db.query(self.model)
        for key, value in (criteria or {}).items():
            query = query.filter(getattr(self.model, key) == value)
        return query.count()

    def exists(self, id: str) -> bool:
        return self.db.query(self.model.id).filter(self.model.id == id).first() is not None
