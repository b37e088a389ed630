"""
Repository for the app_settings key-value store.
"""

from __future__ import annotations

import logging
from typing import Callable

import sqlite3

from persistence.database import with_connection

logger = logging.getLogger(__name__)

_UPSERT_SQL = """
    INSERT INTO app_settings (key, value) VALUES (?, ?)
    ON CONFLICT(key) DO UPDATE SET value = excluded.value
"""


class SettingsRepo:
    """
    Read/write app_settings table. On DB errors, logs and re-raises so callers decide how to degrade.
    get() returns None for missing key; set() raises on failure.
    """

    def __init__(self, connector: Callable[[], sqlite3.Connection]) -> None:
        self._connector = connector

    def get(self, key: str) -> str | None:
        """Return value for key, or None if not found."""

        def get_one(conn: sqlite3.Connection) -> str | None:
            cur = conn.execute("SELECT value FROM app_settings WHERE key = ?", (key,))
            row = cur.fetchone()
            return row[0] if row else None

        try:
            return with_connection(self._connector, get_one)
        except sqlite3.Error as e:
            logger.exception("SettingsRepo.get failed: %s", e)
            raise

    def set(self, key: str, value: str) -> None:
        """Store value for key, replacing any previous value."""
        try:
            with_connection(
                self._connector,
                lambda conn: conn.execute(_UPSERT_SQL, (key, value)),
                commit=True,
            )
        except sqlite3.Error as e:
            logger.exception("SettingsRepo.set failed: %s", e)
            raise

    def delete(self, key: str) -> None:
        """Remove key from app_settings. No-op if key is missing."""
        try:
            with_connection(
                self._connector,
                lambda conn: conn.execute(
                    "DELETE FROM app_settings WHERE key = ?", (key,)
                ),
                commit=True,
            )
        except sqlite3.Error as e:
            logger.exception("SettingsRepo.delete failed: %s", e)
            raise
