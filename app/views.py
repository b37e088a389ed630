"""
JSON-ready view data for the web API and CLI: noise status, zone lists, settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from audio.level import (
    DISCLAIMER,
    classify,
    format_level,
    level_percent,
    status_color,
    status_headline,
    status_hint,
    threshold_summary,
)

if TYPE_CHECKING:
    from audio.meter import NoiseMeter
    from zones import Zone, ZoneRegistry

EMPTY_ZONES_HEADER = "Add a zone to get started."
ZONES_HEADER = "Your gym zones"


def noise_status(level: float | None, permission_denied: bool = False) -> dict[str, Any]:
    tier = classify(level)
    return {
        "level": level,
        "display": format_level(level),
        "tier": tier,
        "color": status_color(tier),
        "percent": level_percent(level),
        "headline": status_headline(tier),
        "hint": status_hint(tier),
        "permission_denied": permission_denied,
    }


def meter_status(meter: NoiseMeter) -> dict[str, Any]:
    permission = meter.permission
    out = noise_status(
        meter.level, permission_denied=permission is not None and not permission.granted
    )
    out["active"] = meter.is_active
    return out


def zone_view(zone: Zone, current_zone_id: str | None) -> dict[str, Any]:
    out = zone.to_dict()
    out["isCurrent"] = zone.id == current_zone_id
    return out


def zones_view(registry: ZoneRegistry) -> dict[str, Any]:
    current = registry.current_zone_id
    items = [zone_view(z, current) for z in registry.ordered_zones]
    return {
        "header": ZONES_HEADER if items else EMPTY_ZONES_HEADER,
        "zones": items,
        "currentZoneId": current,
    }


def settings_view(meter: NoiseMeter) -> dict[str, Any]:
    return {
        "microphone_permission": meter.permission_status(),
        "thresholds": threshold_summary(),
        "disclaimer": DISCLAIMER,
    }
