"""
Query Executor
==============

Runs validated read-only queries against the program database.
"""

import time
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from data_assistant.errors import (
    DatabaseUnavailableError,
    QueryExecutionError,
    QueryValidationError,
)
from data_assistant.models import ExecutionResult, Scalar
from data_assistant.validator import validate

logger = structlog.get_logger(__name__)

# PostgreSQL SQLSTATE for statement_timeout cancellation
QUERY_CANCELED = "57014"


def create_query_engine(
    url: str,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_timeout: float = 10.0,
    **kwargs: Any,
) -> Engine:
    """
    Create the shared, bounded connection pool.

    Args:
        url: SQLAlchemy database URL
        pool_size: Persistent connections kept in the pool
        max_overflow: Extra connections allowed under load
        pool_timeout: Seconds to wait for a free connection

    Returns:
        Configured SQLAlchemy Engine
    """
    if url.startswith("sqlite"):
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
        **kwargs,
    )


def normalize_value(value: Any) -> Any:
    """Map a driver value onto the row scalar types."""
    if value is None or isinstance(value, (bool, int, float, str, datetime, date)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (dict, list)):
        # json / jsonb columns
        return value
    if isinstance(value, (bytes, memoryview)):
        return bytes(value).hex()
    return str(value)


def _driver_message(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig).strip()
    return str(exc).strip()


def _is_unavailable(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, PoolTimeoutError):
        return True
    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated:
            return True
        return getattr(exc.orig, "pgcode", None) == QUERY_CANCELED
    return False


class QueryExecutor:
    """
    Executes one validated query per call on a pooled connection.

    The executor never retries; repair is the orchestrator's job.
    """

    def __init__(self, engine: Engine, statement_timeout_seconds: float = 15.0) -> None:
        self.engine = engine
        self.statement_timeout_seconds = statement_timeout_seconds

    def _prepare(self, conn: Connection) -> None:
        """Make the transaction read-only and bounded where the dialect allows."""
        if conn.dialect.name != "postgresql":
            return
        timeout_ms = int(self.statement_timeout_seconds * 1000)
        conn.exec_driver_sql("SET TRANSACTION READ ONLY")
        conn.exec_driver_sql(f"SET LOCAL statement_timeout = {timeout_ms}")

    def _unavailable(self, exc: SQLAlchemyError, start_time: float) -> DatabaseUnavailableError:
        message = _driver_message(exc)
        logger.error(
            "query_unavailable",
            error=message,
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return DatabaseUnavailableError(message)

    def _checkout(self, start_time: float) -> Connection:
        """Get a prepared connection; any failure here is infrastructure."""
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as exc:
            raise self._unavailable(exc, start_time) from exc

        try:
            self._prepare(conn)
        except SQLAlchemyError as exc:
            conn.close()
            raise self._unavailable(exc, start_time) from exc
        return conn

    def execute(self, sql: str) -> ExecutionResult:
        """
        Re-validate and run ``sql``.

        Raises:
            QueryValidationError: if the text is not a single read-only query
            QueryExecutionError: if the database rejects the query
            DatabaseUnavailableError: if the database cannot be reached, the
                pool is exhausted, the connection drops or the statement
                times out
        """
        outcome = validate(sql)
        if not outcome.valid:
            raise QueryValidationError(outcome.reason, sql=sql)

        start_time = time.perf_counter()
        with self._checkout(start_time) as conn:
            try:
                result = conn.execution_options(no_parameters=True).exec_driver_sql(
                    outcome.sql
                )
                columns = list(result.keys())
                rows: list[dict[str, Scalar]] = [
                    {column: normalize_value(value) for column, value in zip(columns, record)}
                    for record in result
                ]
            except SQLAlchemyError as exc:
                if _is_unavailable(exc):
                    raise self._unavailable(exc, start_time) from exc
                logger.warning(
                    "query_failed",
                    error=_driver_message(exc),
                    duration_ms=(time.perf_counter() - start_time) * 1000,
                )
                raise QueryExecutionError(_driver_message(exc), sql=outcome.sql) from exc

        logger.info(
            "query_executed",
            row_count=len(rows),
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return ExecutionResult(rows=rows, row_count=len(rows))
