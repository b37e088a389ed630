"""
Normalized config section access.
Provides get_section() and section-specific getters (meter, web, persistence) so
config normalization lives in one place; app and CLI use these instead of duplicating logic.
"""

from __future__ import annotations

from typing import Any, Callable

DEFAULT_ZONES_KEY = "gymNoiseBuddy.zones.v1"


def _clamp_int(value: Any, low: int, high: int, default: int) -> int:
    """Parse value to int and clamp to [low, high]; return default if value is None or invalid."""
    if value is None:
        return default
    try:
        return max(low, min(high, int(value)))
    except (TypeError, ValueError):
        return default


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def get_section(
    raw_config: dict,
    section: str,
    defaults: dict[str, Any],
    validators: dict[str, Callable[[Any], Any]] | None = None,
) -> dict[str, Any]:
    """
    Return a normalized config section by merging raw section with defaults and applying validators.

    Args:
        raw_config: Full merged config dict (e.g. from load_config()).
        section: Top-level key (e.g. "meter", "web").
        defaults: Default values for the section; only these keys are taken from the raw section.
        validators: Optional dict mapping section key -> callable(value) -> value (e.g. clamp int).

    Returns:
        New dict with all keys from defaults, overridden by raw section, then validated.
    """
    validators = validators or {}
    raw_section = raw_config.get(section)
    if not isinstance(raw_section, dict):
        raw_section = {}
    out = dict(defaults)
    for k, v in raw_section.items():
        if k in defaults:
            out[k] = v
    for k, validator in validators.items():
        if k in out:
            try:
                out[k] = validator(out[k])
            except (TypeError, ValueError):
                out[k] = defaults.get(k)
    return out


def get_meter_section(raw_config: dict) -> dict[str, Any]:
    """
    Return normalized noise meter config: sampling interval, sample rate, input device.
    device may be an index or a name substring (sounddevice semantics), or None for the default input.
    """
    m = raw_config.get("meter")
    if not isinstance(m, dict):
        m = {}
    device = m.get("device")
    if isinstance(device, str):
        device = _optional_str(device)
        if device is not None and device.isdigit():
            device = int(device)
    elif device is not None and not isinstance(device, int):
        device = None
    return {
        "enabled": bool(m.get("enabled", True)),
        "interval_ms": _clamp_int(m.get("interval_ms"), 50, 2000, 250),
        "sample_rate": _clamp_int(m.get("sample_rate"), 8000, 96000, 16000),
        "device": device,
    }


def get_web_section(raw_config: dict) -> dict[str, Any]:
    """Return normalized web server config (host, port)."""
    return get_section(
        raw_config,
        "web",
        {"host": "127.0.0.1", "port": 8766},
        {
            "host": lambda v: _optional_str(v) or "127.0.0.1",
            "port": lambda v: _clamp_int(v, 1, 65535, 8766),
        },
    )


def get_persistence_section(raw_config: dict) -> dict[str, Any]:
    """Return normalized persistence config (SQLite path, zones storage key)."""
    return get_section(
        raw_config,
        "persistence",
        {"db_path": "data/gymnoise.db", "zones_key": DEFAULT_ZONES_KEY},
        {
            "db_path": lambda v: _optional_str(v) or "data/gymnoise.db",
            "zones_key": lambda v: _optional_str(v) or DEFAULT_ZONES_KEY,
        },
    )


__all__ = [
    "DEFAULT_ZONES_KEY",
    "get_meter_section",
    "get_persistence_section",
    "get_section",
    "get_web_section",
]
