"""
Remote Catalog
Loads the official app catalog for the current network

Notes:
- The catalog url may contain a ``{network}`` placeholder.
- Failures are reported through ``status``/``last_error`` and raised; there is
  no retry here.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests

from ..core.errors import CatalogLoadError
from ..models.app_entry import FetchStatus


class RemoteCatalogLoader:
    name = "Remote Catalog"

    def __init__(self, settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.status = FetchStatus.PENDING
        self.last_error = ""
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "Mozilla/5.0 (AppShelf; RemoteCatalogLoader)",
                "Accept": "application/json",
            }
        )
        self._catalog_url = ""
        self._timeout_seconds = 12.0
        self.reload_from_settings()

    def reload_from_settings(self) -> None:
        self._catalog_url = str(self.settings.get("catalog_url", "") or "").strip()
        self._timeout_seconds = float(self.settings.get("catalog_request_timeout_seconds", 12.0) or 12.0)

    def catalog_url(self, network_id: str) -> str:
        return self._catalog_url.replace("{network}", str(network_id))

    async def load(self, network_id: str) -> List[Dict[str, Any]]:
        self.status = FetchStatus.LOADING
        self.last_error = ""
        try:
            entries = await asyncio.to_thread(self._fetch, network_id)
        except CatalogLoadError as exc:
            self.status = FetchStatus.ERROR
            self.last_error = exc.reason
            raise
        self.status = FetchStatus.SUCCESS
        return entries

    def _fetch(self, network_id: str) -> List[Dict[str, Any]]:
        url = self.catalog_url(network_id)
        if not url:
            raise CatalogLoadError("catalog_url is empty")
        try:
            response = self.session.get(url, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise CatalogLoadError(f"Catalog request failed: {exc}") from exc
        if response.status_code >= 400:
            raise CatalogLoadError(f"Catalog request failed with HTTP {response.status_code}", response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogLoadError("Catalog response is not valid JSON") from exc
        # Paginated responses wrap the list in ``results``.
        if isinstance(payload, dict):
            payload = payload.get("results", [])
        if not isinstance(payload, list):
            raise CatalogLoadError("Catalog response is not a list")
        return [item for item in payload if isinstance(item, dict)]


class StaticCatalogLoader:
    """In-memory catalog, optionally filtered by a factory per network."""
    name = "Static Catalog"

    def __init__(self, entries: Iterable[Dict[str, Any]] = (), factory: Optional[Callable[[str], Iterable[Dict[str, Any]]]] = None):
        self._entries = [dict(entry) for entry in entries]
        self._factory = factory
        self.status = FetchStatus.PENDING
        self.last_error = ""

    async def load(self, network_id: str) -> List[Dict[str, Any]]:
        self.status = FetchStatus.LOADING
        self.last_error = ""
        try:
            entries = list(self._factory(network_id)) if self._factory else list(self._entries)
        except CatalogLoadError as exc:
            self.status = FetchStatus.ERROR
            self.last_error = exc.reason
            raise
        self.status = FetchStatus.SUCCESS
        return [dict(entry) for entry in entries]
