"""Execution adapters: the narrow interface to the SQL backend under test."""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable, Protocol, runtime_checkable

import duckdb

from sqllogic.model import ExecutionResult, Failure, Success

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class AdapterUnavailable(RuntimeError):
    """The backend cannot be opened; aborts the whole run."""


@runtime_checkable
class ExecutionAdapter(Protocol):
    """Backend-agnostic interface used by the runner.

    An adapter owns one session. Every directive of a script is executed
    through the same adapter, in order, so DDL and DML from earlier
    directives are visible to later ones.
    """

    name: str

    def execute(self, sql: str) -> ExecutionResult:
        """Run *sql*; backend errors are returned as ``Failure``."""
        ...

    def close(self) -> None:
        ...


class SQLiteAdapter:
    """Adapter over the standard library ``sqlite3`` module."""

    name = "sqlite"

    def __init__(self, database: str = MEMORY) -> None:
        try:
            # The runner may call execute from a timeout worker thread
            self._conn = sqlite3.connect(database, isolation_level=None, check_same_thread=False)
        except sqlite3.Error as e:
            raise AdapterUnavailable(f"Cannot open SQLite database '{database}': {e}") from e
        self.database = database

    def execute(self, sql: str) -> ExecutionResult:
        logger.debug("sqlite: %s", sql)
        try:
            cursor = self._conn.execute(sql)
            if cursor.description is None:
                return Success()
            columns = tuple(d[0] for d in cursor.description)
            return Success(rows=tuple(tuple(row) for row in cursor.fetchall()), columns=columns)
        except (sqlite3.Error, sqlite3.Warning) as e:
            return Failure(str(e))

    def interrupt(self) -> None:
        self._conn.interrupt()

    def close(self) -> None:
        self._conn.close()


class DuckDBAdapter:
    """Adapter over an in-process DuckDB connection."""

    name = "duckdb"

    def __init__(self, database: str = MEMORY) -> None:
        try:
            self._conn = duckdb.connect(database)
        except duckdb.Error as e:
            raise AdapterUnavailable(f"Cannot open DuckDB database '{database}': {e}") from e
        self.database = database

    def execute(self, sql: str) -> ExecutionResult:
        logger.debug("duckdb: %s", sql)
        try:
            self._conn.execute(sql)
            if self._conn.description is None:
                return Success()
            columns = tuple(d[0] for d in self._conn.description)
            return Success(rows=tuple(tuple(row) for row in self._conn.fetchall()), columns=columns)
        except duckdb.Error as e:
            return Failure(str(e))

    def interrupt(self) -> None:
        self._conn.interrupt()

    def close(self) -> None:
        self._conn.close()


# Registry of bundled adapters by engine name
ADAPTERS: dict[str, Callable[[str], ExecutionAdapter]] = {
    "sqlite": SQLiteAdapter,
    "duckdb": DuckDBAdapter,
}


def create_adapter(engine: str, database: str = MEMORY) -> ExecutionAdapter:
    """Open a new adapter session for *engine*.

    Raises:
        ValueError: If the engine name is unknown.
        AdapterUnavailable: If the backend cannot be opened.
    """
    factory = ADAPTERS.get(engine.lower())
    if factory is None:
        raise ValueError(f"Unknown engine '{engine}'. Available: {', '.join(sorted(ADAPTERS))}")
    logger.debug("Opening %s adapter on %s", engine, database)
    return factory(database)
