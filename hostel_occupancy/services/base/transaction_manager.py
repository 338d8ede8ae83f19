"""
Transaction manager utilities for service layer operations.

One ``start()`` block is one atomic unit: it commits when the block exits
cleanly and rolls back everything flushed inside it otherwise.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple, Type, TypeVar
from uuid import uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from hostel_occupancy.core.exceptions import ConcurrencyConflictError, ConflictError, RepositoryError
from hostel_occupancy.core.logging import get_logger
from hostel_occupancy.utils.datetime_utils import utc_now

T = TypeVar("T")


@dataclass
class TransactionContext:
    """Context information for a transaction."""

    transaction_id: str = field(default_factory=lambda: str(uuid4()))
    started_at: datetime = field(default_factory=utc_now)
    committed: bool = False
    rolled_back: bool = False
    completed_at: Optional[datetime] = None
    error: Optional[Exception] = None
    savepoints: List[str] = field(default_factory=list)

    @property
    def duration_ms(self) -> Optional[float]:
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds() * 1000
        return None


class TransactionManager:
    """
    Transaction management for the service layer:
    - atomic units with commit/rollback
    - savepoints for steps whose failure must not abort the unit
    - bounded retry of units that lost an optimistic version race
    """

    def __init__(self, db_session: Session):
        self.db = db_session
        self._logger = get_logger(self.__class__.__name__)
        self._active_transactions: List[TransactionContext] = []

    @contextmanager
    def start(self) -> Iterator[TransactionContext]:
        """
        Start a new atomic unit.

        Example:
            with transaction_manager.start() as ctx:
                # perform operations
                # automatic commit on success, rollback on exception
        """
        ctx = TransactionContext()
        self._active_transactions.append(ctx)
        self._logger.debug(
            f"Transaction started: {ctx.transaction_id}",
            extra={"transaction_id": ctx.transaction_id},
        )

        try:
            yield ctx
            if not ctx.committed and not ctx.rolled_back:
                self._commit(ctx)
        except Exception as exc:
            ctx.error = exc
            if not ctx.rolled_back:
                self._rollback(ctx, exc)
            raise
        finally:
            ctx.completed_at = utc_now()
            self._active_transactions.remove(ctx)
            self._logger.debug(
                f"Transaction completed: {ctx.transaction_id} "
                f"({'committed' if ctx.committed else 'rolled back'})",
                extra={
                    "transaction_id": ctx.transaction_id,
                    "committed": ctx.committed,
                    "rolled_back": ctx.rolled_back,
                    "duration_ms": ctx.duration_ms,
                },
            )

    @contextmanager
    def savepoint(self, name: Optional[str] = None) -> Iterator[str]:
        """
        Run a block inside a SAVEPOINT.

        On error only the work done inside the block is rolled back and the
        exception is re-raised; the enclosing unit stays usable.
        """
        savepoint_name = name or f"sp_{uuid4().hex[:8]}"
        if self._active_transactions:
            self._active_transactions[-1].savepoints.append(savepoint_name)

        try:
            with self.db.begin_nested():
                self._logger.debug(f"Savepoint created: {savepoint_name}")
                yield savepoint_name
        except Exception as exc:
            self._logger.warning(
                f"Rolled back to savepoint: {savepoint_name}",
                extra={"savepoint": savepoint_name, "error": str(exc)},
            )
            raise

    def run(
        self,
        unit: Callable[[], T],
        attempts: int = 1,
        retry_on: Tuple[Type[Exception], ...] = (ConcurrencyConflictError,),
    ) -> T:
        """
        Execute ``unit`` as one atomic unit, retrying on ``retry_on`` errors.

        ``unit`` must reload everything it touches: a rollback expires all
        previously loaded state.
        """
        for attempt in range(1, attempts + 1):
            try:
                with self.start():
                    return unit()
            except retry_on as exc:
                if attempt >= attempts:
                    raise
                self._logger.warning(
                    f"Retrying transaction after conflict (attempt {attempt}/{attempts})",
                    extra={"attempt": attempt, "error": str(exc)},
                )
        raise RuntimeError("unreachable")

    def _commit(self, ctx: TransactionContext) -> None:
        try:
            self.db.commit()
            ctx.committed = True
            self._logger.debug(
                f"Transaction committed: {ctx.transaction_id}",
                extra={"transaction_id": ctx.transaction_id},
            )
        except StaleDataError as e:
            raise ConcurrencyConflictError() from e
        except IntegrityError as e:
            raise ConflictError("Commit rejected by a uniqueness constraint") from e
        except SQLAlchemyError as e:
            self._logger.error(
                f"Commit failed for transaction {ctx.transaction_id}: {e}",
                exc_info=True,
                extra={"transaction_id": ctx.transaction_id},
            )
            raise RepositoryError(f"Commit failed: {e}") from e

    def _rollback(self, ctx: TransactionContext, exc: Exception) -> None:
        try:
            self.db.rollback()
            ctx.rolled_back = True
            self._logger.info(
                f"Transaction rolled back: {ctx.transaction_id} - {exc}",
                extra={"transaction_id": ctx.transaction_id, "error": str(exc)},
            )
        except SQLAlchemyError as e:
            # Keep the original exception as the one that propagates
            self._logger.error(
                f"Rollback failed for transaction {ctx.transaction_id}: {e}",
                exc_info=True,
            )
