"""
Manifest Resolver
Fetches the per-app manifest document and turns it into a resolved entry
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ..core.errors import ManifestResolutionError
from ..models.app_entry import EntryRecord, FetchStatus


class BaseManifestResolver(ABC):
    """
    Stable resolver contract for the enrichment tracker.
    """
    api_version = 1
    name = "UnnamedResolver"

    @abstractmethod
    async def resolve(self, url: str) -> EntryRecord:
        """Return a fully populated entry or raise ManifestResolutionError."""
        raise NotImplementedError


class HttpManifestResolver(BaseManifestResolver):
    name = "HTTP Manifest"
    manifest_file = "manifest.json"

    def __init__(self, settings=None, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": "Mozilla/5.0 (AppShelf; ManifestResolver)",
                "Accept": "application/json,text/plain,*/*",
            }
        )
        self._timeout_seconds = 10.0
        self.reload_from_settings()

    def reload_from_settings(self) -> None:
        if self.settings is None:
            return
        self._timeout_seconds = float(self.settings.get("manifest_request_timeout_seconds", 10.0) or 10.0)

    def manifest_url(self, url: str) -> str:
        return f"{url.strip().rstrip('/')}/{self.manifest_file}"

    async def resolve(self, url: str) -> EntryRecord:
        base = str(url or "").strip().rstrip("/")
        if not base:
            raise ManifestResolutionError(url, "App url is empty")
        payload = await asyncio.to_thread(self._fetch, base)
        return self._to_entry(base, payload)

    def _fetch(self, base: str) -> Dict[str, Any]:
        try:
            response = self.session.get(self.manifest_url(base), timeout=self._timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ManifestResolutionError(base, f"Failed to fetch manifest: {exc}") from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise ManifestResolutionError(base, "Manifest is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ManifestResolutionError(base, "Manifest is not a JSON object")
        return payload

    def _to_entry(self, base: str, payload: Dict[str, Any]) -> EntryRecord:
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ManifestResolutionError(base, "Manifest does not define a name")
        icon_url = str(payload.get("iconUrl") or "").strip()
        icon_path = str(payload.get("iconPath") or "").strip().lstrip("/")
        if not icon_url and icon_path:
            icon_url = f"{base}/{icon_path}"
        provided_by = payload.get("providedBy")
        return EntryRecord(
            url=base,
            name=name,
            id=None,
            icon_url=icon_url,
            description=str(payload.get("description") or "").strip(),
            provider=dict(provided_by) if isinstance(provided_by, dict) else None,
            fetch_status=FetchStatus.SUCCESS,
        )
