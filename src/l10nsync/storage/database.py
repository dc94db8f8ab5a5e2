"""Database engine and session utilities.

This module provides:
- Database: Connection manager (WAL mode and busy handling for SQLite)
- Session utilities for ORM reads and serializable write transactions
- Retry logic for SQLite busy timeout handling

The pattern:
- Use session() for reads (branch selection, text unit mapping)
- Use immediate_transaction() for one branch's statistic upserts and deletes,
  so a failed reconciliation leaves no partial rows behind
"""

from __future__ import annotations

import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from l10nsync.config.models import DatabaseConfig

logger = structlog.get_logger()

# Retry configuration for SQLite busy handling
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 0.1  # 100ms base
DEFAULT_RETRY_MAX_DELAY = 2.0  # 2s max
DEFAULT_BUSY_TIMEOUT_MS = 30000


def _is_database_locked_error(error: Exception) -> bool:
    """Check if error is a SQLite database locked error."""
    error_str = str(error).lower()
    return "database is locked" in error_str or "database is busy" in error_str


class Database:
    """Connection manager for the statistics database.

    SQLite URLs get WAL mode, foreign keys and retry logic with exponential
    backoff for busy timeouts during concurrent writes.
    """

    def __init__(
        self,
        url: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        retry_max_delay: float = DEFAULT_RETRY_MAX_DELAY,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
    ) -> None:
        self.url = url
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        self._busy_timeout_ms = busy_timeout_ms
        self.engine = self._create_engine()

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> Database:
        return cls(
            config.url,
            max_retries=config.max_retries,
            retry_base_delay=config.retry_base_delay_sec,
            busy_timeout_ms=config.busy_timeout_ms,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def _create_engine(self) -> Engine:
        connect_args: dict[str, Any] = {}
        if self.is_sqlite:
            connect_args["check_same_thread"] = False
        engine = create_engine(self.url, connect_args=connect_args, pool_pre_ping=True)
        if self.is_sqlite:
            busy_timeout_ms = self._busy_timeout_ms

            def _on_connect(dbapi_conn: Any, _connection_record: Any) -> None:
                _configure_pragmas(dbapi_conn, busy_timeout_ms)

            event.listen(engine, "connect", _on_connect)
        return engine

    def create_all(self) -> None:
        """Create all tables from SQLModel metadata."""
        # Registers the table classes on SQLModel.metadata
        from l10nsync.storage import models  # noqa: F401

        SQLModel.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """ORM session for reads. Objects stay usable after the block (no expiry)."""
        with Session(self.engine, expire_on_commit=False) as session:
            yield session

    @contextmanager
    def immediate_transaction(
        self,
        max_retries: int | None = None,
    ) -> Generator[Session, None, None]:
        """
        Session with BEGIN IMMEDIATE for serializable writes.

        BEGIN IMMEDIATE acquires a RESERVED lock up front, blocking other
        writers but allowing readers. Acquiring the lock is retried with
        exponential backoff when SQLite reports the database as busy.

        The session commits on successful exit and rolls back on exception.

        Args:
            max_retries: Override default max retries (default: 3)
        """
        retries = max_retries if max_retries is not None else self._max_retries
        session = self._begin_immediate(retries)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _begin_immediate(self, retries: int) -> Session:
        for attempt in range(retries + 1):  # +1 for initial attempt
            session = Session(self.engine, expire_on_commit=False)
            if not self.is_sqlite:
                return session
            try:
                session.execute(text("BEGIN IMMEDIATE"))
                return session
            except OperationalError as e:
                session.close()
                if not _is_database_locked_error(e) or attempt >= retries:
                    raise
                delay = min(
                    self._retry_base_delay * (2**attempt),
                    self._retry_max_delay,
                )
                logger.warning(
                    "sqlite_busy_retry",
                    attempt=attempt + 1,
                    max_retries=retries,
                    delay_sec=delay,
                )
                time.sleep(delay)
        raise AssertionError("unreachable")


def _configure_pragmas(dbapi_conn: Any, busy_timeout_ms: int) -> None:
    """Configure SQLite for concurrent access."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
    cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
