"""
Zone model, id generation, document (de)serialization, ordering, and default selection.
"""
from __future__ import annotations

import json
import logging
import secrets
import string
import time
import unicodedata
from dataclasses import dataclass
from typing import Any, Iterable

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase
ID_SUFFIX_LEN = 6


@dataclass(frozen=True)
class Zone:
    id: str
    name: str
    notes: str | None = None
    is_favorite: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Document form; notes is omitted when absent."""
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.notes is not None:
            out["notes"] = self.notes
        out["isFavorite"] = self.is_favorite
        return out

    @classmethod
    def from_dict(cls, data: Any) -> Zone:
        """Build a Zone from its document form. Raises ValueError if required fields are missing or blank."""
        if not isinstance(data, dict):
            raise ValueError(f"zone entry must be an object, got {type(data).__name__}")
        zone_id = data.get("id")
        if not isinstance(zone_id, str) or not zone_id:
            raise ValueError("zone entry has no id")
        name = clean_name(data.get("name") if isinstance(data.get("name"), str) else "")
        if name is None:
            raise ValueError(f"zone {zone_id} has no name")
        notes = data.get("notes")
        return cls(
            id=zone_id,
            name=name,
            notes=clean_notes(notes if isinstance(notes, str) else None),
            is_favorite=data.get("isFavorite") is True,
        )


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_zone_id() -> str:
    """Millisecond timestamp plus a random suffix, both base36 (e.g. "lx2k9q1c-4f8a0z")."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(ID_SUFFIX_LEN))
    return f"{_base36(int(time.time() * 1000))}-{suffix}"


def clean_name(name: str | None) -> str | None:
    """Trimmed name, or None if nothing is left."""
    trimmed = (name or "").strip()
    return trimmed or None


def clean_notes(notes: str | None) -> str | None:
    """Trimmed notes, or None when absent or blank (never an empty string)."""
    trimmed = (notes or "").strip()
    return trimmed or None


def _collation_key(name: str) -> tuple[str, str, str]:
    # Accent- and case-insensitive first, then case-insensitive, then raw for a total order.
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), name.casefold(), name)


def order_zones(zones: Iterable[Zone]) -> list[Zone]:
    """Favorites first, then by name."""
    return sorted(zones, key=lambda z: (not z.is_favorite, _collation_key(z.name)))


def pick_default_zone_id(zones: Iterable[Zone]) -> str | None:
    """First favorite in storage order, else the first zone, else None."""
    first: str | None = None
    for zone in zones:
        if zone.is_favorite:
            return zone.id
        if first is None:
            first = zone.id
    return first


def dump_document(zones: Iterable[Zone], current_zone_id: str | None) -> str:
    return json.dumps(
        {"zones": [z.to_dict() for z in zones], "currentZoneId": current_zone_id},
        ensure_ascii=False,
    )


def parse_document(raw: str) -> tuple[list[Zone], str | None]:
    """
    Parse a stored document into (zones, current_zone_id).
    Raises ValueError for invalid JSON or a non-object document. Malformed entries,
    duplicate ids, and blank names are skipped. current_zone_id is returned as stored;
    callers validate it against the zones.
    """
    try:
        data = json.loads(raw)
    except (TypeError, RecursionError, json.JSONDecodeError) as e:
        raise ValueError(f"zones document is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("zones document must be a JSON object")

    entries = data.get("zones")
    if not isinstance(entries, list):
        entries = []
    zones: list[Zone] = []
    seen: set[str] = set()
    for entry in entries:
        try:
            zone = Zone.from_dict(entry)
        except ValueError as e:
            logger.warning("Skipping stored zone: %s", e)
            continue
        if zone.id in seen:
            logger.warning("Skipping duplicate stored zone id %s", zone.id)
            continue
        seen.add(zone.id)
        zones.append(zone)

    current = data.get("currentZoneId")
    if not isinstance(current, str) or not current:
        current = None
    return zones, current
