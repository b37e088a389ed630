"""
Durable slot for the zone registry document: one JSON string under a namespaced settings key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sdk import DEFAULT_ZONES_KEY

if TYPE_CHECKING:
    from persistence.settings_repo import SettingsRepo


class ZoneStore:
    """Full-document read/replace on a single key. Errors from the repo propagate to the caller."""

    def __init__(self, settings_repo: SettingsRepo, key: str = DEFAULT_ZONES_KEY) -> None:
        self._settings_repo = settings_repo
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def read(self) -> str | None:
        return self._settings_repo.get(self._key)

    def write(self, payload: str) -> None:
        self._settings_repo.set(self._key, payload)

    def clear(self) -> None:
        self._settings_repo.delete(self._key)
