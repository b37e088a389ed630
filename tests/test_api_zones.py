"""Tests for the run_web FastAPI app: zones and noise endpoints with in-memory collaborators."""

from __future__ import annotations

import asyncio
import json
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from audio.meter import NoiseMeter
from config import AppConfig
from run_web import create_app
from sdk import MicPermission, MicrophoneSource
from zones import ZoneRegistry


class MemoryStore:
    def __init__(self, initial: str | None = None) -> None:
        self.value = initial

    def read(self) -> str | None:
        return self.value

    def write(self, payload: str) -> None:
        self.value = payload


class ScriptedMicrophone(MicrophoneSource):
    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.on_sample: Callable[[float], None] | None = None
        self.stopped = 0

    def request_permission(self) -> MicPermission:
        return MicPermission(granted=self.granted, can_ask_again=False)

    def start(self, on_sample: Callable[[float], None]) -> None:
        self.on_sample = on_sample

    def stop(self) -> None:
        self.stopped += 1


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def mic() -> ScriptedMicrophone:
    return ScriptedMicrophone()


@pytest.fixture
def client(store: MemoryStore, mic: ScriptedMicrophone):
    registry = ZoneRegistry(store)
    app = create_app(AppConfig({}), registry, NoiseMeter(mic))
    with TestClient(app) as c:
        yield c


def _add(client: TestClient, name: str, notes: str | None = None) -> dict:
    r = client.post("/api/zones", json={"name": name, "notes": notes})
    assert r.status_code == 200
    return r.json()["zone"]


def test_health_reports_loaded(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "zones_loaded": True}


def test_list_empty(client: TestClient) -> None:
    data = client.get("/api/zones").json()
    assert data["zones"] == []
    assert data["currentZoneId"] is None
    assert data["header"] == "Add a zone to get started."


def test_add_zone_trims_and_selects(client: TestClient) -> None:
    zone = _add(client, "  Gym A  ", "  ")
    assert zone["name"] == "Gym A"
    assert "notes" not in zone
    assert zone["isCurrent"] is True
    assert client.get("/api/zones").json()["currentZoneId"] == zone["id"]


def test_add_blank_name_is_400(client: TestClient) -> None:
    r = client.post("/api/zones", json={"name": "   "})
    assert r.status_code == 400
    assert r.json() == {"error": "Zone name is required."}
    assert client.get("/api/zones").json()["zones"] == []


def test_add_invalid_body_is_400(client: TestClient) -> None:
    assert client.post("/api/zones", content=b"not json").status_code == 400
    assert client.post("/api/zones", json=["A"]).status_code == 400
    assert client.post("/api/zones", json={"name": 5}).status_code == 400


def test_update_zone(client: TestClient) -> None:
    zone = _add(client, "A", "old")
    r = client.put(f"/api/zones/{zone['id']}", json={"name": " B ", "notes": "new"})
    assert r.status_code == 200
    assert r.json()["zone"]["name"] == "B"
    assert r.json()["zone"]["notes"] == "new"


def test_update_errors(client: TestClient) -> None:
    zone = _add(client, "A")
    assert client.put(f"/api/zones/{zone['id']}", json={"name": ""}).status_code == 400
    assert client.put("/api/zones/missing", json={"name": "B"}).status_code == 404


def test_favorite_and_ordering(client: TestClient) -> None:
    _add(client, "B")
    a = _add(client, "A")
    _add(client, "C")
    r = client.post(f"/api/zones/{a['id']}/favorite")
    assert r.json()["zone"]["isFavorite"] is True
    names = [z["name"] for z in client.get("/api/zones").json()["zones"]]
    assert names == ["A", "B", "C"]
    assert client.post("/api/zones/missing/favorite").status_code == 404


def test_set_current(client: TestClient) -> None:
    _add(client, "A")
    b = _add(client, "B")
    r = client.put("/api/zones/current", json={"id": b["id"]})
    assert r.status_code == 200
    assert r.json()["currentZoneId"] == b["id"]
    assert client.put("/api/zones/current", json={"id": "missing"}).status_code == 404
    assert client.put("/api/zones/current", json={}).status_code == 400
    assert client.get("/api/zones").json()["currentZoneId"] == b["id"]


def test_delete_current_reassigns(client: TestClient) -> None:
    a = _add(client, "A")
    b = _add(client, "B")
    client.post(f"/api/zones/{b['id']}/favorite")
    r = client.delete(f"/api/zones/{a['id']}")
    assert r.status_code == 200
    assert r.json()["currentZoneId"] == b["id"]
    assert client.delete(f"/api/zones/{a['id']}").status_code == 404


def test_state_written_to_store_on_shutdown(store: MemoryStore, mic: ScriptedMicrophone) -> None:
    registry = ZoneRegistry(store)
    app = create_app(AppConfig({}), registry, NoiseMeter(mic))
    with TestClient(app) as c:
        zone_id = c.post("/api/zones", json={"name": "Racks"}).json()["zone"]["id"]
    doc = json.loads(store.value)
    assert doc["currentZoneId"] == zone_id
    assert doc["zones"][0]["name"] == "Racks"


def test_existing_zones_loaded_on_startup(mic: ScriptedMicrophone) -> None:
    store = MemoryStore(
        json.dumps({"zones": [{"id": "z", "name": "Mats", "isFavorite": False}], "currentZoneId": None})
    )
    app = create_app(AppConfig({}), ZoneRegistry(store), NoiseMeter(mic))
    with TestClient(app) as c:
        data = c.get("/api/zones").json()
    assert data["currentZoneId"] == "z"
    assert data["zones"][0]["name"] == "Mats"


# ---- noise ----
def test_noise_idle(client: TestClient) -> None:
    data = client.get("/api/noise").json()
    assert data["display"] == "--"
    assert data["tier"] == "quiet"
    assert data["active"] is False


def test_noise_start_sample_stop(client: TestClient, mic: ScriptedMicrophone) -> None:
    r = client.post("/api/noise/start")
    assert r.json()["ok"] is True
    assert r.json()["active"] is True
    mic.on_sample(-25.0)
    data = client.get("/api/noise").json()
    assert data["level"] == 75.0
    assert data["tier"] == "loud"
    assert data["hint"] == "Too loud for focus -> ANC / other zone."
    assert client.post("/api/noise/stop").json() == {"ok": True}
    assert client.get("/api/noise").json()["level"] is None
    assert mic.stopped == 1


def test_noise_start_denied(store: MemoryStore) -> None:
    app = create_app(AppConfig({}), ZoneRegistry(store), NoiseMeter(ScriptedMicrophone(granted=False)))
    with TestClient(app) as c:
        data = c.post("/api/noise/start").json()
        settings = c.get("/api/settings").json()
    assert data["ok"] is False
    assert data["permission_denied"] is True
    assert settings["microphone_permission"] == "Denied"


def test_settings(client: TestClient) -> None:
    data = client.get("/api/settings").json()
    assert data["microphone_permission"] == "Granted"
    assert [t["label"] for t in data["thresholds"]] == [
        "Quiet: 60 dB or lower",
        "OK: 61-70 dB",
        "Loud: above 70 dB",
    ]


class LoopCheckingMicrophone(ScriptedMicrophone):
    """Records whether each device call ran on a thread with a running event loop."""

    def __init__(self) -> None:
        super().__init__()
        self.calls_on_loop: list[bool] = []

    def _record(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.calls_on_loop.append(False)
        else:
            self.calls_on_loop.append(True)

    def request_permission(self) -> MicPermission:
        self._record()
        return super().request_permission()

    def start(self, on_sample: Callable[[float], None]) -> None:
        self._record()
        super().start(on_sample)

    def stop(self) -> None:
        self._record()
        super().stop()


def test_noise_start_stop_keep_device_calls_off_event_loop(store: MemoryStore) -> None:
    mic = LoopCheckingMicrophone()
    app = create_app(AppConfig({}), ZoneRegistry(store), NoiseMeter(mic))
    with TestClient(app) as c:
        assert c.post("/api/noise/start").json()["ok"] is True
        assert c.post("/api/noise/stop").json() == {"ok": True}
    assert mic.calls_on_loop
    assert not any(mic.calls_on_loop)
