"""Tests for config: load_yaml_file, _deep_merge, load_config, AppConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from config import AppConfig, _deep_merge, load_config, load_yaml_file


# ---- load_yaml_file ----
def test_load_yaml_file_missing_returns_empty() -> None:
    assert load_yaml_file(Path("/nonexistent/config.yaml")) == {}


def test_load_yaml_file_valid_dict_returns_parsed(tmp_path: Path) -> None:
    p = tmp_path / "config.yaml"
    p.write_text("key: value\nnested:\n  a: 1\n")
    assert load_yaml_file(p) == {"key": "value", "nested": {"a": 1}}


def test_load_yaml_file_invalid_yaml_returns_empty(tmp_path: Path) -> None:
    p = tmp_path / "bad.yaml"
    p.write_text("key: [unclosed\n")
    assert load_yaml_file(p) == {}


def test_load_yaml_file_non_dict_returns_empty(tmp_path: Path) -> None:
    p = tmp_path / "list.yaml"
    p.write_text("[1, 2, 3]")
    assert load_yaml_file(p) == {}


def test_load_yaml_file_empty_file_returns_empty(tmp_path: Path) -> None:
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_yaml_file(p) == {}


# ---- _deep_merge ----
def test_deep_merge_nested_override_wins() -> None:
    base = {"meter": {"interval_ms": 250, "sample_rate": 16000}, "web": {"port": 1}}
    override = {"meter": {"interval_ms": 100}}
    out = _deep_merge(base, override)
    assert out == {"meter": {"interval_ms": 100, "sample_rate": 16000}, "web": {"port": 1}}
    assert base["meter"]["interval_ms"] == 250


def test_deep_merge_non_dict_replaces() -> None:
    assert _deep_merge({"a": {"b": 1}}, {"a": 5}) == {"a": 5}


# ---- load_config ----
def test_load_config_missing_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GYMNOISE_CONFIG", str(tmp_path / "missing.yaml"))
    with pytest.raises(FileNotFoundError):
        load_config()


def test_load_config_merges_user_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    root = tmp_path / "config.yaml"
    root.write_text("meter:\n  interval_ms: 250\n  sample_rate: 16000\nweb:\n  port: 8766\n")
    (tmp_path / "config.user.yaml").write_text("meter:\n  interval_ms: 500\n")
    monkeypatch.setenv("GYMNOISE_CONFIG", str(root))
    raw = load_config()
    assert raw["meter"] == {"interval_ms": 500, "sample_rate": 16000}
    assert raw["web"]["port"] == 8766


def test_project_config_yaml_loads(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GYMNOISE_CONFIG", raising=False)
    config = AppConfig(load_config())
    assert config.get_zones_key() == "gymNoiseBuddy.zones.v1"
    assert config.get_meter_config()["interval_ms"] == 250


# ---- AppConfig ----
def test_app_config_defaults_on_empty() -> None:
    config = AppConfig({})
    assert config.get_log_level() == "INFO"
    assert config.get_log_path() == "logs/gymnoise.log"
    assert config.get_db_path() == "data/gymnoise.db"
    assert config.get_zones_key() == "gymNoiseBuddy.zones.v1"
    assert config.get_web_config() == {"host": "127.0.0.1", "port": 8766}


def test_app_config_none_raw() -> None:
    config = AppConfig(None)
    assert config.raw == {}
    assert config.get("meter") is None


def test_app_config_empty_log_file_disables() -> None:
    assert AppConfig({"logging": {"file": ""}}).get_log_path() is None


def test_app_config_getitem_and_get() -> None:
    config = AppConfig({"web": {"port": 9000}})
    assert config["web"] == {"port": 9000}
    assert config.get("missing", 3) == 3
    with pytest.raises(KeyError):
        config["missing"]
