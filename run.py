#!/usr/bin/env python3
"""
Gym Noise Buddy entry point: load config, set up logging, initialize database, start web UI.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from config import AppConfig, get_config_path, load_config

logger = logging.getLogger(__name__)

# Ensure project root is on path
_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _positive_number(section: dict, key: str, default, label: str) -> None:
    value = section.get(key, default)
    if value is None:
        return
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a positive number") from None
    if value <= 0:
        raise ValueError(f"{label} must be positive")


def validate_config(config: dict) -> None:
    """Validate required config values. Raises ValueError with a clear message if invalid."""
    if not config:
        raise ValueError("Config is empty")
    meter = config.get("meter")
    if meter is None:
        meter = {}
    if not isinstance(meter, dict):
        raise ValueError("config.meter must be a mapping")
    _positive_number(meter, "interval_ms", 250, "config.meter.interval_ms")
    _positive_number(meter, "sample_rate", 16000, "config.meter.sample_rate")
    web = config.get("web")
    if web is None:
        web = {}
    if not isinstance(web, dict):
        raise ValueError("config.web must be a mapping")
    port = web.get("port", 8766)
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ValueError("config.web.port must be an integer") from None
    if not (1 <= port <= 65535):
        raise ValueError("config.web.port must be between 1 and 65535")
    persistence = config.get("persistence")
    if persistence is None:
        persistence = {}
    if not isinstance(persistence, dict):
        raise ValueError("config.persistence must be a mapping")
    key = persistence.get("zones_key")
    if key is not None and not str(key).strip():
        raise ValueError("config.persistence.zones_key must be non-empty")


def setup_logging(config: AppConfig, root: Path) -> None:
    """Configure the root logger from config.logging (level, optional file)."""
    level = getattr(logging, config.get_log_level().upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    log_path = config.get_log_path()
    if log_path:
        path = Path(log_path) if os.path.isabs(log_path) else root / log_path
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(fh)


def resolve_db_path(config: AppConfig, root: Path) -> Path:
    db_path = Path(config.get_db_path())
    if not db_path.is_absolute():
        db_path = root / db_path
    return db_path


def bootstrap_config_and_db(root: Path) -> tuple[AppConfig, Path]:
    """
    Load and validate config, set up logging, initialize database.
    Returns (config, db_path). Single place for entry-point startup.
    """
    raw = load_config()
    validate_config(raw)
    config = AppConfig(raw)
    setup_logging(config, root)
    logger.info("Config path: %s", get_config_path())
    from persistence.database import init_database

    db_path = resolve_db_path(config, root)
    init_database(str(db_path))
    logger.info("Database initialized at %s", db_path)
    return (config, db_path)


def main() -> None:
    """Start the web UI (run_web)."""
    from run_web import main as web_main

    web_main()


if __name__ == "__main__":
    main()
