"""FastAPI app exposing the AppShelf directory for web clients."""

from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from ..core.errors import DuplicateAppError, ManifestResolutionError
from ..core.search_engine import FALLBACK_SUGGESTION
from ..models.app_entry import FetchStatus
from .runtime import AppShelfRuntime, build_runtime


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class CustomAppCreateRequest(BaseModel):
    url: str


class NetworkSelectRequest(BaseModel):
    networkId: str


def create_app(runtime: Optional[AppShelfRuntime] = None) -> FastAPI:
    runtime = runtime or build_runtime()
    manager = runtime.manager
    audit_log: deque[Dict[str, Any]] = deque(maxlen=500)
    audit_lock = RLock()

    def record_audit(event: str, detail: Dict[str, Any]) -> None:
        with audit_lock:
            audit_log.appendleft(
                {
                    "at": _utc_now_iso(),
                    "event": event,
                    "detail": detail,
                }
            )

    async def ensure_loaded() -> None:
        # First request triggers the catalog fetch; later ones only seed.
        if manager.catalog_status == FetchStatus.PENDING:
            await manager.refresh()
        else:
            manager.sync()

    app = FastAPI(title="AppShelf API", version="1.0.0")

    @app.get("/health")
    def health() -> Dict:
        return {"ok": True, "time": _utc_now_iso()}

    @app.get("/api/apps")
    async def get_apps() -> Dict:
        await ensure_loaded()
        return manager.snapshot()

    @app.get("/api/apps/search")
    async def search_apps(q: str = Query("")) -> Dict:
        await ensure_loaded()
        outcome = manager.search(q)
        return {
            "query": q,
            "results": [entry.to_dict() for entry in outcome.results],
            "showAuxiliarySections": outcome.show_auxiliary_sections,
            "suggestion": FALLBACK_SUGGESTION if outcome.is_empty else None,
        }

    @app.post("/api/apps/refresh")
    async def refresh_apps() -> Dict:
        await manager.refresh()
        record_audit("apps.refresh", {"status": manager.catalog_status.value})
        return manager.snapshot()

    @app.post("/api/apps/{app_id}/pin")
    async def toggle_pin(app_id: str) -> Dict:
        pinned = manager.toggle_pin(app_id)
        record_audit("apps.pin", {"id": app_id, "pinned": pinned})
        return {"ok": True, "id": app_id, "pinned": pinned}

    @app.post("/api/apps/custom")
    async def add_custom_app(body: CustomAppCreateRequest) -> Dict:
        try:
            entry = await manager.add_custom_app(body.url)
        except DuplicateAppError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ManifestResolutionError as exc:
            raise HTTPException(status_code=502, detail=f"Manifest could not be loaded: {exc.reason}") from exc
        record_audit("apps.custom.add", {"url": entry.url, "name": entry.name})
        return {"ok": True, "app": entry.to_dict()}

    @app.delete("/api/apps/custom/{key:path}")
    async def remove_custom_app(key: str) -> Dict:
        removed = manager.remove_app(key)
        if not removed:
            raise HTTPException(status_code=404, detail="Custom app not found.")
        record_audit("apps.custom.remove", {"key": key})
        return {"ok": True}

    @app.put("/api/network")
    async def select_network(body: NetworkSelectRequest) -> Dict:
        network_id = body.networkId.strip()
        if not network_id:
            raise HTTPException(status_code=400, detail="networkId is required")
        runtime.settings.set("network_id", network_id)
        await manager.network_changed()
        record_audit("network.select", {"network": network_id})
        return manager.snapshot()

    @app.get("/api/audit")
    def get_audit(limit: int = Query(100, ge=1, le=500)) -> Dict:
        with audit_lock:
            events = list(audit_log)[:limit]
        return {"events": events}

    return app


app = create_app()
