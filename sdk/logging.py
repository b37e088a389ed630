"""
Logging helper: consistent logger names (gymnoise.<name>).
"""

from __future__ import annotations

import logging


def get_logger(component_name: str) -> logging.Logger:
    """
    Return a logger with a consistent name for the given component.

    Args:
        component_name: Short name of the component (e.g. "meter", "zones", "web").

    Returns:
        logging.Logger with name "gymnoise." + component_name.
    """
    name = (component_name or "").strip() or "app"
    return logging.getLogger(f"gymnoise.{name}")


__all__ = ["get_logger"]
