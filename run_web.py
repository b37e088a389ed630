#!/usr/bin/env python3
"""
Gym Noise Buddy web entry point: FastAPI server exposing the noise meter and zone registry as JSON.
Run: python run_web.py
Open: http://127.0.0.1:8766/api/noise
"""

from __future__ import annotations

import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path

# Ensure project root is on path
_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from fastapi import FastAPI  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.requests import Request  # noqa: E402 module-level so FastAPI can resolve request: Request in route handlers

from app.views import meter_status, settings_view, zone_view, zones_view  # noqa: E402
from audio.meter import NoiseMeter  # noqa: E402
from config import AppConfig  # noqa: E402
from run import bootstrap_config_and_db  # noqa: E402
from sdk import get_logger  # noqa: E402
from zones import ZoneRegistry  # noqa: E402

logger = get_logger("web")

NAME_REQUIRED = "Zone name is required."
ZONE_NOT_FOUND = "Zone not found"


def build_services(config: AppConfig, db_path: Path) -> tuple[ZoneRegistry, NoiseMeter]:
    """Wire the SQLite-backed zone registry and the noise meter from config."""
    from persistence.database import get_connection
    from persistence.settings_repo import SettingsRepo
    from persistence.zone_store import ZoneStore
    from sdk import MicrophoneSource, NoOpMicrophone

    def conn_factory():
        return get_connection(str(db_path))

    store = ZoneStore(SettingsRepo(conn_factory), key=config.get_zones_key())
    registry = ZoneRegistry(store)

    meter_cfg = config.get_meter_config()
    microphone: MicrophoneSource
    if meter_cfg["enabled"]:
        from audio.microphone import SoundDeviceMicrophone

        microphone = SoundDeviceMicrophone(
            sample_rate=meter_cfg["sample_rate"],
            interval_ms=meter_cfg["interval_ms"],
            device=meter_cfg["device"],
        )
    else:
        logger.info("Noise meter disabled in config; using no-op microphone")
        microphone = NoOpMicrophone()
    return registry, NoiseMeter(microphone)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _json_body(request: Request) -> dict | None:
    """Parsed JSON object body, or None if the body is missing or not an object."""
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _zone_fields(body: dict) -> tuple[str, str | None] | None:
    """(name, notes) from a request body, or None if their types are wrong."""
    name = body.get("name", "")
    notes = body.get("notes")
    if not isinstance(name, str) or (notes is not None and not isinstance(notes, str)):
        return None
    return name, notes


def create_app(config: AppConfig, registry: ZoneRegistry, meter: NoiseMeter) -> FastAPI:
    """Build the FastAPI app (for running or testing). The registry is loaded on startup."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await registry.load()
        logger.info("Zone registry ready (%d zone(s))", len(registry.zones))
        try:
            yield
        finally:
            meter.stop()
            registry.close()

    app = FastAPI(title="Gym Noise Buddy", lifespan=lifespan)
    app.state.config = config

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request, exc: RequestValidationError
    ):
        """Convert 422 validation errors to 400 with a single error message for the client."""
        errors = exc.errors()
        msg = "; ".join(e.get("msg", str(e)) for e in errors) if errors else str(exc)
        logger.debug("Request validation failed: %s (details: %s)", msg, errors)
        return _error(400, f"Request validation: {msg}")

    @app.get("/health")
    async def health():
        return {"status": "ok", "zones_loaded": registry.loaded}

    # --- Zones ---

    @app.get("/api/zones")
    async def api_zones_list():
        return zones_view(registry)

    @app.post("/api/zones")
    async def api_zones_add(request: Request):
        body = await _json_body(request)
        fields = _zone_fields(body) if body is not None else None
        if fields is None:
            return _error(400, "Invalid JSON body")
        zone = registry.add_zone(*fields)
        if zone is None:
            return _error(400, NAME_REQUIRED)
        return {"ok": True, "zone": zone_view(zone, registry.current_zone_id)}

    @app.put("/api/zones/current")
    async def api_zones_set_current(request: Request):
        body = await _json_body(request)
        zone_id = body.get("id") if body is not None else None
        if not isinstance(zone_id, str):
            return _error(400, "id required")
        if not registry.set_current_zone(zone_id):
            return _error(404, ZONE_NOT_FOUND)
        return {"ok": True, "currentZoneId": registry.current_zone_id}

    @app.put("/api/zones/{zone_id}")
    async def api_zones_update(zone_id: str, request: Request):
        body = await _json_body(request)
        fields = _zone_fields(body) if body is not None else None
        if fields is None:
            return _error(400, "Invalid JSON body")
        if not fields[0].strip():
            return _error(400, NAME_REQUIRED)
        if not registry.update_zone(zone_id, *fields):
            return _error(404, ZONE_NOT_FOUND)
        return {"ok": True, "zone": zone_view(registry.get_zone(zone_id), registry.current_zone_id)}

    @app.delete("/api/zones/{zone_id}")
    async def api_zones_delete(zone_id: str):
        if not registry.delete_zone(zone_id):
            return _error(404, ZONE_NOT_FOUND)
        return {"ok": True, "currentZoneId": registry.current_zone_id}

    @app.post("/api/zones/{zone_id}/favorite")
    async def api_zones_toggle_favorite(zone_id: str):
        if not registry.toggle_favorite(zone_id):
            return _error(404, ZONE_NOT_FOUND)
        return {"ok": True, "zone": zone_view(registry.get_zone(zone_id), registry.current_zone_id)}

    # --- Noise meter ---

    @app.get("/api/noise")
    async def api_noise():
        return meter_status(meter)

    @app.post("/api/noise/start")
    def api_noise_start():
        """Called by the client when it becomes visible/focused. Device calls block, so this runs in the threadpool."""
        subscription = meter.start()
        out = meter_status(meter)
        out["ok"] = subscription is not None
        return out

    @app.post("/api/noise/stop")
    def api_noise_stop():
        """Called by the client when it is hidden or navigated away."""
        meter.stop()
        return {"ok": True}

    @app.get("/api/settings")
    async def api_settings():
        return settings_view(meter)

    return app


def main() -> None:
    config, db_path = bootstrap_config_and_db(_ROOT)
    registry, meter = build_services(config, db_path)
    app = create_app(config, registry, meter)
    web_cfg = config.get_web_config()
    host = os.environ.get("GYMNOISE_WEB_HOST", web_cfg["host"])
    port = int(os.environ.get("GYMNOISE_WEB_PORT", web_cfg["port"]))
    import uvicorn

    logger.info("Gym Noise Buddy web API: http://%s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
