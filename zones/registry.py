"""
In-memory zone registry with current selection, persisted as one JSON document.

All mutations are synchronous on in-memory state and must come from a single control
context (the event loop in the web app, the main thread in the CLI). After load() has
completed, every mutation queues a full-document write on a single worker thread, so
writes land in mutation order and the last completed write reflects the last mutation.
Storage failures are logged and never reach the caller.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

from zones.models import (
    Zone,
    clean_name,
    clean_notes,
    dump_document,
    new_zone_id,
    order_zones,
    parse_document,
    pick_default_zone_id,
)

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def read(self) -> str | None: ...

    def write(self, payload: str) -> None: ...


class ZoneRegistry:
    """
    Owns the zone collection and the current selection. Pass the instance explicitly to
    whatever needs it; there is no global registry.
    Not-found ids and blank names are no-ops; operations report whether anything changed.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._zones: dict[str, Zone] = {}
        self._current_zone_id: str | None = None
        self._loaded = False
        self._loading = False
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="zones-store")

    # --- read side ---

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def zones(self) -> tuple[Zone, ...]:
        """Zones in storage order."""
        return tuple(self._zones.values())

    @property
    def ordered_zones(self) -> list[Zone]:
        """Favorites first, then by name. Recomputed on every access."""
        return order_zones(self._zones.values())

    @property
    def current_zone_id(self) -> str | None:
        return self._current_zone_id

    @property
    def current_zone(self) -> Zone | None:
        if self._current_zone_id is None:
            return None
        return self._zones.get(self._current_zone_id)

    def get_zone(self, zone_id: str) -> Zone | None:
        return self._zones.get(zone_id)

    def snapshot(self) -> dict[str, Any]:
        """Document form of the current state (what a write would store)."""
        return {
            "zones": [z.to_dict() for z in self._zones.values()],
            "currentZoneId": self._current_zone_id,
        }

    # --- lifecycle ---

    async def load(self) -> None:
        """
        Read the stored document once. Missing, unreadable, or malformed data leaves the
        registry as it is (empty at startup); either way the registry is marked loaded and
        the resulting state is written back. A stored selection that no longer matches a
        zone is replaced by the default selection.
        """
        if self._loaded or self._loading:
            return
        self._loading = True
        try:
            loop = asyncio.get_running_loop()
            try:
                raw = await loop.run_in_executor(self._executor, self._store.read)
            except Exception as e:
                logger.warning("Could not read stored zones, starting empty: %s", e)
                raw = None

            if raw:
                try:
                    zones, current = parse_document(raw)
                except Exception as e:
                    logger.warning("Discarding malformed zones document: %s", e)
                else:
                    self._zones = {z.id: z for z in zones}
                    if current is None or current not in self._zones:
                        current = pick_default_zone_id(self._zones.values())
                    self._current_zone_id = current
                    logger.info("Loaded %d zone(s)", len(self._zones))

            self._loaded = True
        finally:
            self._loading = False
        self._persist()

    def flush(self, timeout: float | None = None) -> None:
        """Block until every queued write has finished."""
        try:
            self._executor.submit(lambda: None).result(timeout)
        except RuntimeError:
            pass

    def close(self) -> None:
        """Finish queued writes and stop the writer thread. Later mutations stay in memory only."""
        self._executor.shutdown(wait=True)

    # --- mutations ---

    def add_zone(self, name: str, notes: str | None = None) -> Zone | None:
        """Add a zone; it becomes current if nothing is selected. Returns None for a blank name."""
        trimmed = clean_name(name)
        if trimmed is None:
            return None
        zone_id = new_zone_id()
        while zone_id in self._zones:
            zone_id = new_zone_id()
        zone = Zone(id=zone_id, name=trimmed, notes=clean_notes(notes), is_favorite=False)
        self._zones[zone.id] = zone
        if self._current_zone_id is None:
            self._current_zone_id = zone.id
        logger.debug("Added zone %s (%s)", zone.id, zone.name)
        self._persist()
        return zone

    def update_zone(self, zone_id: str, name: str, notes: str | None = None) -> bool:
        """Replace name and notes (notes=None clears them); id and favorite flag are kept."""
        trimmed = clean_name(name)
        zone = self._zones.get(zone_id)
        if trimmed is None or zone is None:
            return False
        self._zones[zone_id] = Zone(
            id=zone.id, name=trimmed, notes=clean_notes(notes), is_favorite=zone.is_favorite
        )
        self._persist()
        return True

    def delete_zone(self, zone_id: str) -> bool:
        if self._zones.pop(zone_id, None) is None:
            return False
        if self._current_zone_id == zone_id:
            self._current_zone_id = pick_default_zone_id(self._zones.values())
        logger.debug("Deleted zone %s; current is now %s", zone_id, self._current_zone_id)
        self._persist()
        return True

    def toggle_favorite(self, zone_id: str) -> bool:
        zone = self._zones.get(zone_id)
        if zone is None:
            return False
        self._zones[zone_id] = Zone(
            id=zone.id, name=zone.name, notes=zone.notes, is_favorite=not zone.is_favorite
        )
        self._persist()
        return True

    def set_current_zone(self, zone_id: str) -> bool:
        if zone_id not in self._zones:
            return False
        self._current_zone_id = zone_id
        self._persist()
        return True

    # --- persistence ---

    def _persist(self) -> None:
        if not self._loaded:
            return
        payload = dump_document(self._zones.values(), self._current_zone_id)
        try:
            self._executor.submit(self._write, payload)
        except RuntimeError:
            logger.debug("Zone registry closed; change kept in memory only")

    def _write(self, payload: str) -> None:
        try:
            self._store.write(payload)
        except Exception as e:
            logger.warning("Saving zones failed (kept in memory): %s", e)
