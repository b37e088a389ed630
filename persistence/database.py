"""
SQLite connection and schema initialization for Gym Noise Buddy.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def with_connection(
    connector: Callable[[], sqlite3.Connection],
    fn: Callable[[sqlite3.Connection], _T],
    *,
    commit: bool = False,
) -> _T:
    """
    Obtain a connection, call fn(conn), and close in finally.
    If commit=True, commit on success and rollback on exception.
    """
    conn = connector()
    try:
        result = fn(conn)
        if commit:
            conn.commit()
        return result
    except Exception:
        if commit:
            conn.rollback()
        raise
    finally:
        conn.close()

_SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    """Apply performance and robustness PRAGMAs. Safe to call on every connection."""
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")


def init_database(db_path: str) -> None:
    """
    Create the database file if needed and apply schema.
    Idempotent; safe to call on every startup.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    schema_sql = _SCHEMA_PATH.read_text()
    conn = sqlite3.connect(db_path)
    try:
        _apply_pragmas(conn)
        conn.executescript(schema_sql)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s", db_path)


def get_connection(db_path: str) -> sqlite3.Connection:
    """
    Return a new SQLite connection. Caller must close it.
    Registry writes run on a worker thread, so check_same_thread is off.
    """
    conn = sqlite3.connect(db_path, check_same_thread=False)
    _apply_pragmas(conn)
    return conn

