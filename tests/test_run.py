"""Tests for run: validate_config, resolve_db_path, bootstrap_config_and_db."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from config import AppConfig
from run import bootstrap_config_and_db, resolve_db_path, validate_config


def test_validate_config_accepts_defaults() -> None:
    validate_config({"meter": {"interval_ms": 250, "sample_rate": 16000}, "web": {"port": 8766}})


def test_validate_config_empty_raises() -> None:
    with pytest.raises(ValueError, match="empty"):
        validate_config({})


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"meter": {"interval_ms": 0}}, "interval_ms"),
        ({"meter": {"interval_ms": "fast"}}, "interval_ms"),
        ({"meter": {"sample_rate": -1}}, "sample_rate"),
        ({"meter": []}, "config.meter"),
        ({"web": {"port": 70000}}, "port"),
        ({"web": {"port": "http"}}, "port"),
        ({"persistence": {"zones_key": "  "}}, "zones_key"),
    ],
)
def test_validate_config_rejects(raw: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        validate_config(raw)


def test_resolve_db_path_relative_and_absolute(tmp_path: Path) -> None:
    assert resolve_db_path(AppConfig({}), tmp_path) == tmp_path / "data" / "gymnoise.db"
    absolute = tmp_path / "x.db"
    config = AppConfig({"persistence": {"db_path": str(absolute)}})
    assert resolve_db_path(config, Path("/elsewhere")) == absolute


def test_bootstrap_creates_database(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "logging:\n  level: WARNING\n  file: ''\npersistence:\n  db_path: db/test.db\nweb:\n  port: 8766\n"
    )
    monkeypatch.setenv("GYMNOISE_CONFIG", str(cfg))
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    try:
        config, db_path = bootstrap_config_and_db(tmp_path)
    finally:
        for h in root_logger.handlers[:]:
            if h not in handlers:
                root_logger.removeHandler(h)
    assert db_path == tmp_path / "db" / "test.db"
    assert db_path.exists()
    assert config.get_log_path() is None
