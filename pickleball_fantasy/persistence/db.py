"""
Database connection, initialization and the transaction boundary.
"""
from __future__ import annotations

import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, TypeVar

from pickleball_fantasy.config import get_settings
from pickleball_fantasy.errors import InfrastructureError

from .schema import all_schema_sql

logger = logging.getLogger(__name__)

T = TypeVar("T")

_db_path: Path | None = None


def set_db_path(path: str | Path) -> None:
    """Set the database path. Call before first get_connection if not using the configured one."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    """Return the current database path."""
    if _db_path is not None:
        return _db_path
    return get_settings().db_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Return a new SQLite connection in autocommit mode.
    Multi-statement writes must go through transaction(); the busy timeout
    is the persistence-boundary timeout.
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(
        str(path),
        timeout=get_settings().db_timeout_seconds,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str | Path | None = None) -> None:
    """Create or ensure all tables exist."""
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    try:
        conn.execute("PRAGMA journal_mode = WAL")
        conn.executescript(all_schema_sql())
        conn.commit()
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    One BEGIN IMMEDIATE ... COMMIT/ROLLBACK boundary. Writers serialize on the
    database write lock. Lock timeouts and other operational failures surface as
    InfrastructureError; domain errors roll back and propagate unchanged.
    """
    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.OperationalError as e:
        raise InfrastructureError(f"Could not start transaction: {e}") from e
    try:
        yield conn
    except sqlite3.OperationalError as e:
        conn.rollback()
        raise InfrastructureError(f"Database operation failed: {e}") from e
    except BaseException:
        conn.rollback()
        raise
    try:
        conn.commit()
    except sqlite3.OperationalError as e:
        conn.rollback()
        raise InfrastructureError(f"Commit failed: {e}") from e


def with_retries(fn: Callable[[], T], attempts: int | None = None, backoff_seconds: float = 0.05) -> T:
    """Call fn, retrying on InfrastructureError up to `attempts` times in total."""
    total = attempts if attempts is not None else get_settings().db_retry_attempts
    total = max(1, total)
    for attempt in range(1, total + 1):
        try:
            return fn()
        except InfrastructureError:
            if attempt == total:
                raise
            logger.warning("Infrastructure error on attempt %d/%d; retrying", attempt, total)
            time.sleep(backoff_seconds * attempt)
    raise AssertionError("unreachable")
