# inventory/database/gateway.py
# Executes SQL statements against the engine, each bounded by an explicit deadline.

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql.elements import TextClause

from inventory.api.errors import DatabaseError, QueryTimeoutError
from inventory.utils.logger import logger

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 5


class Deadline:
    """A point in time, measured on the monotonic clock, by which a database call must finish."""

    def __init__(self, timeout_seconds: float):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive.")
        self.timeout_seconds = timeout_seconds
        self.expires_at = time.monotonic() + timeout_seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

    def __repr__(self):
        return f"<Deadline(timeout={self.timeout_seconds}s, remaining={self.remaining():.3f}s)>"


@dataclass(frozen=True)
class ExecResult:
    """Metadata returned by a write statement."""
    rowcount: int
    last_insert_id: Optional[int]


class DatabaseGateway:
    """
    Thin executor over a pooled SQLAlchemy Engine.

    Each call runs on a worker thread and the caller waits at most the time left
    on its Deadline. On expiry the caller gets QueryTimeoutError; the worker is
    left to finish and hands its connection back to the pool.
    SQLAlchemy errors are translated to DatabaseError.
    """

    def __init__(self, engine: Engine, max_workers: Optional[int] = None):
        if not isinstance(engine, Engine):
            raise TypeError("engine must be an instance of sqlalchemy.engine.Engine")
        self.engine = engine
        if max_workers is None:
            # Without explicit sizing, one worker per pooled connection.
            pool = engine.pool
            max_workers = max(1, pool.size()) if isinstance(pool, QueuePool) else DEFAULT_MAX_WORKERS
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="db-gateway")
        logger.debug(f"DatabaseGateway initialized (workers={max_workers}).")

    def _run(self, operation: str, work: Callable[[], T], deadline: Deadline,
             on_abandoned: Optional[Callable[[], None]] = None) -> T:
        """
        Runs work on a worker and waits until the deadline.

        on_abandoned is called from the worker once work that outlived its deadline
        has finished, whether it succeeded or not.
        """
        if deadline.expired():
            logger.warning(f"{operation}: deadline already expired before dispatch.")
            raise QueryTimeoutError(f"{operation} exceeded its {deadline.timeout_seconds}s deadline.")

        future = self._executor.submit(work)
        try:
            return future.result(timeout=deadline.remaining())
        except FuturesTimeoutError as e:
            if not future.cancel() and on_abandoned is not None:
                future.add_done_callback(lambda _: on_abandoned())
            logger.warning(f"{operation}: no response within {deadline.timeout_seconds}s.")
            raise QueryTimeoutError(f"{operation} exceeded its {deadline.timeout_seconds}s deadline.") from e
        except SQLAlchemyError as e:
            logger.error(f"{operation}: database error: {e}", exc_info=True)
            raise DatabaseError(f"{operation} failed: {e}") from e

    def query(self, statement: TextClause, params: Optional[Dict[str, Any]], deadline: Deadline,
              operation: str = "query") -> List[Row]:
        """Runs a SELECT and returns every row."""
        def work() -> List[Row]:
            with self.engine.connect() as connection:
                return list(connection.execute(statement, params or {}).all())
        return self._run(operation, work, deadline)

    def query_one(self, statement: TextClause, params: Optional[Dict[str, Any]], deadline: Deadline,
                  operation: str = "query_one") -> Optional[Row]:
        """Runs a SELECT and returns the first row, or None when nothing matches."""
        def work() -> Optional[Row]:
            with self.engine.connect() as connection:
                return connection.execute(statement, params or {}).first()
        return self._run(operation, work, deadline)

    def execute(self, statement: TextClause, params: Optional[Dict[str, Any]], deadline: Deadline,
                operation: str = "execute", on_abandoned: Optional[Callable[[], None]] = None) -> ExecResult:
        """
        Runs a write statement in its own transaction and returns rowcount / last insert id.
        A write that times out may still commit; on_abandoned runs when it is done.
        """
        def work() -> ExecResult:
            with self.engine.begin() as connection:
                result = connection.execute(statement, params or {})
                return ExecResult(rowcount=result.rowcount, last_insert_id=result.lastrowid)
        return self._run(operation, work, deadline, on_abandoned)

    def shutdown(self):
        """Stops accepting work. Running statements are not interrupted."""
        self._executor.shutdown(wait=False)
        logger.debug("DatabaseGateway executor shut down.")
