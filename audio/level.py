"""
Convert raw microphone amplitude to a display level and classify it into a loudness tier.
All functions are pure; None means "no reading" and is accepted everywhere.
"""
from __future__ import annotations

import math
from typing import Literal

from audio.constants import (
    DISCLAIMER,
    LEVEL_MAX,
    LEVEL_MIN,
    LEVEL_OFFSET,
    LOUD_HEADLINE,
    OK_HEADLINE,
    OK_HINT,
    OK_MAX,
    QUIET_MAX,
    SUGGESTION_TEXT,
    TIER_COLORS,
    TIER_LOUD,
    TIER_OK,
    TIER_QUIET,
)

Tier = Literal["quiet", "ok", "loud"]


def clamp(value: float, low: float, high: float) -> float:
    """Return value restricted to [low, high]."""
    return min(high, max(low, value))


def amplitude_to_level(raw: float | None) -> float | None:
    """
    Map a raw amplitude reading onto the LEVEL_MIN..LEVEL_MAX display scale.
    Returns None when there is no reading (None or NaN).
    """
    if raw is None:
        return None
    raw = float(raw)
    if math.isnan(raw):
        return None
    return clamp(raw + LEVEL_OFFSET, LEVEL_MIN, LEVEL_MAX)


def classify(level: float | None) -> Tier:
    """Return the loudness tier for level. No reading is quiet, never loud."""
    if level is None:
        return TIER_QUIET
    if level <= QUIET_MAX:
        return TIER_QUIET
    if level <= OK_MAX:
        return TIER_OK
    return TIER_LOUD


def status_color(tier: str) -> str:
    """Display color token for tier; unknown tiers get the quiet color."""
    return TIER_COLORS.get(tier, TIER_COLORS[TIER_QUIET])


def level_percent(level: float | None) -> float:
    """Position of level on a 0--100 gauge; 0 when there is no reading."""
    if level is None:
        return 0.0
    percent = (level - LEVEL_MIN) / (LEVEL_MAX - LEVEL_MIN) * 100
    return clamp(percent, 0.0, 100.0)


def format_level(level: float | None) -> str:
    if level is None:
        return "--"
    return f"~{level:.0f} dB"


def status_headline(tier: str) -> str:
    return LOUD_HEADLINE if tier == TIER_LOUD else OK_HEADLINE


def status_hint(tier: str) -> str:
    return SUGGESTION_TEXT if tier == TIER_LOUD else OK_HINT


def threshold_summary() -> list[dict[str, str]]:
    """Human-readable dB range per tier, in tier order."""
    return [
        {"tier": TIER_QUIET, "label": f"Quiet: {QUIET_MAX} dB or lower"},
        {"tier": TIER_OK, "label": f"OK: {QUIET_MAX + 1}-{OK_MAX} dB"},
        {"tier": TIER_LOUD, "label": f"Loud: above {OK_MAX} dB"},
    ]


__all__ = [
    "DISCLAIMER",
    "Tier",
    "amplitude_to_level",
    "clamp",
    "classify",
    "format_level",
    "level_percent",
    "status_color",
    "status_headline",
    "status_hint",
    "threshold_summary",
]
