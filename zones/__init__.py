"""
Zones: user-defined gym spots with notes, a favorite flag, and a current selection.
"""
from __future__ import annotations

from zones.models import Zone, order_zones, pick_default_zone_id
from zones.registry import ZoneRegistry

__all__ = ["Zone", "ZoneRegistry", "order_zones", "pick_default_zone_id"]
