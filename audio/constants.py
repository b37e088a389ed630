"""
Fixed constants for mic level display and loudness tiers.
"""
from __future__ import annotations

# Raw amplitude (dBFS-like, usually negative) + offset -> approximate display dB.
LEVEL_OFFSET = 100
LEVEL_MIN = 30
LEVEL_MAX = 120

# Upper bounds are inclusive: exactly QUIET_MAX is quiet, exactly OK_MAX is ok.
QUIET_MAX = 60
OK_MAX = 70

TIER_QUIET = "quiet"
TIER_OK = "ok"
TIER_LOUD = "loud"
TIERS = (TIER_QUIET, TIER_OK, TIER_LOUD)

TIER_COLORS = {
    TIER_QUIET: "#1E8E3E",
    TIER_OK: "#F6C343",
    TIER_LOUD: "#D93025",
}

SUGGESTION_TEXT = "Too loud for focus -> ANC / other zone."
LOUD_HEADLINE = "Too loud for focus"
OK_HEADLINE = "Noise level OK"
OK_HINT = "Keep the zone, or switch for variety."
DISCLAIMER = (
    "Approximate dB based on mic level, not a calibrated instrument. "
    "Use the trend rather than the absolute number."
)
