"""Persistence gateway.

Wraps a pooled SQLAlchemy engine and exposes raw parameterized SQL:

- ``query(sql, params)``: one statement, its own transaction
- ``with_transaction(callback)``: several statements on one connection,
  committed together or rolled back together

The gateway is constructed explicitly (see ``web.api.lifespan``) and handed
to services; there is no module-level connection state.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Generator, Mapping, TypeVar

import structlog
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from schoolshelf.config.app_config import DatabaseConfig
from schoolshelf.db.schema import DEFAULT_CURRICULUM_COMPONENTS, DEFAULT_SERIES, SCHEMA_STATEMENTS, new_id

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Row = dict[str, Any]


class DatabaseNotConnectedError(RuntimeError):
    """Raised when the gateway is used before connect() or after close()."""


class Transaction:
    """Statement executor bound to one connection inside a transaction."""

    def __init__(self, conn: Connection, slow_query_ms: int):
        self._conn = conn
        self._slow_query_ms = slow_query_ms

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> list[Row]:
        """Execute a statement and return its rows as dictionaries.

        Statements without a result set (plain INSERT/UPDATE/DELETE) return
        an empty list.
        """
        start = time.perf_counter()
        result = self._conn.execute(text(sql), dict(params or {}))
        rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
        duration_ms = (time.perf_counter() - start) * 1000

        if duration_ms > self._slow_query_ms:
            logger.warning(
                "db.slow_query",
                sql=" ".join(sql.split()),
                duration_ms=round(duration_ms, 1),
                rows=len(rows),
            )

        return rows


class Database:
    """Connection pool wrapper with an explicit connect/close lifecycle."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._engine: Engine | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Create the pooled engine. Idempotent."""
        if self._engine is not None:
            return

        url = self.config.url
        kwargs: dict[str, Any] = {}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # A single shared connection keeps the in-memory database alive
            kwargs["poolclass"] = StaticPool
        else:
            kwargs.update(
                pool_size=self.config.pool_size,
                max_overflow=0,
                pool_timeout=self.config.pool_timeout,
                pool_recycle=self.config.pool_recycle,
            )

        engine = create_engine(url, **kwargs)

        database_path = engine.url.database
        if url.startswith("sqlite") and database_path not in (None, "", ":memory:"):
            Path(database_path).parent.mkdir(parents=True, exist_ok=True)

        if url.startswith("sqlite"):
            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_conn, _record):
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys = ON")
                cursor.close()

        self._engine = engine
        logger.info("db.connected", url=engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        """Drain and close all pooled connections."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("db.closed")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise DatabaseNotConnectedError("Database.connect() has not been called")
        return self._engine

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[Transaction, None, None]:
        """Yield a Transaction; commit on success, rollback on any exception.

        Example:
            with db.transaction() as tx:
                tx.query("DELETE FROM book_class_groups WHERE book_id = :id", {"id": book_id})
        """
        with self.engine.connect() as conn:
            conn.begin()
            try:
                yield Transaction(conn, self.config.slow_query_ms)
                conn.commit()
            except Exception:
                conn.rollback()
                logger.debug("db.transaction_rolled_back")
                raise

    def query(self, sql: str, params: Mapping[str, Any] | None = None) -> list[Row]:
        """Run a single statement in its own transaction."""
        with self.transaction() as tx:
            return tx.query(sql, params)

    def with_transaction(self, callback: Callable[[Transaction], T]) -> T:
        """Run ``callback`` inside one transaction and return its result."""
        with self.transaction() as tx:
            return callback(tx)

    def check_connection(self) -> bool:
        """Probe the database with ``SELECT 1``."""
        try:
            self.query("SELECT 1")
            return True
        except (SQLAlchemyError, DatabaseNotConnectedError) as e:
            logger.error("db.connection_error", error=str(e))
            return False

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def init_schema(self, seed: bool = True) -> None:
        """Create tables if missing and seed the default lookup rows.

        Uses IF NOT EXISTS / ON CONFLICT DO NOTHING, so it is safe to run on
        every startup.
        """
        with self.transaction() as tx:
            for statement in SCHEMA_STATEMENTS:
                tx.query(statement)

            if seed:
                for table, names in (
                    ("curriculum_components", DEFAULT_CURRICULUM_COMPONENTS),
                    ("series", DEFAULT_SERIES),
                ):
                    for name in names:
                        tx.query(
                            f"INSERT INTO {table} (id, name) VALUES (:id, :name) "
                            "ON CONFLICT (name) DO NOTHING",
                            {"id": new_id(), "name": name},
                        )

        logger.info("db.schema_initialized", seeded=seed)
