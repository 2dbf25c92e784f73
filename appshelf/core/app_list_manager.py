"""
App List Manager
Ties the catalog, custom apps, pins, and manifest enrichment into one app directory
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from ..models.app_entry import EntryRecord, FetchStatus
from ..sources.manifest_resolver import BaseManifestResolver
from .custom_app_store import CustomAppStore
from .enrichment_tracker import EnrichmentTracker
from .error_log import ErrorCodes, ErrorLogger
from .errors import CatalogLoadError, DuplicateAppError
from .event_bus import EventBus, Events
from .pin_store import PinStore
from .search_engine import SearchOutcome, search
from .source_merger import merge


class AppListManager:
    """Manages the merged app directory and the mutations on top of it"""

    def __init__(
        self,
        catalog_loader,
        custom_store: CustomAppStore,
        pin_store: PinStore,
        resolver: BaseManifestResolver,
        network_getter: Callable[[], Any],
        event_bus: Optional[EventBus] = None,
        error_logger: Optional[Callable[[str, object], None]] = None,
    ):
        self.event_bus = event_bus or EventBus()
        self.error_logger = error_logger or ErrorLogger(self.event_bus)
        self.catalog_loader = catalog_loader
        self.custom_store = custom_store
        self.pin_store = pin_store
        self.resolver = resolver
        self._network_getter = network_getter
        self.tracker = EnrichmentTracker(resolver, error_logger=self.error_logger, event_bus=self.event_bus)
        self._remote_entries: List[Dict[str, Any]] = []
        self._catalog_loaded = False

        # Any write to the custom store re-runs the merge.
        if self.custom_store.event_bus is None:
            self.custom_store.event_bus = self.event_bus
        self.custom_store.event_bus.subscribe(Events.CUSTOM_APPS_CHANGED, self._on_custom_apps_changed)

    @property
    def current_network(self) -> str:
        return str(self._network_getter())

    @property
    def catalog_status(self) -> FetchStatus:
        return self.catalog_loader.status

    @property
    def is_loading(self) -> bool:
        return self.catalog_status == FetchStatus.LOADING

    @property
    def app_list(self) -> List[EntryRecord]:
        return self.tracker.published

    @property
    def custom_apps(self) -> List[EntryRecord]:
        return [entry for entry in self.tracker.published if entry.custom]

    @property
    def pinned_ids(self) -> List[str]:
        return self.pin_store.get()

    @property
    def pinned_apps(self) -> List[EntryRecord]:
        pinned = set(self.pin_store.get())
        # Ids without a listed app are kept in storage but never shown.
        return [entry for entry in self.tracker.published if entry.id is not None and entry.id in pinned]

    def candidates(self) -> List[EntryRecord]:
        return merge(self._remote_entries, self.custom_store.get(), self.current_network)

    async def refresh(self) -> List[EntryRecord]:
        """Reload the catalog and rebuild the published list"""
        self.event_bus.emit(Events.CATALOG_LOADING, {"network": self.current_network})
        try:
            remote = await self.catalog_loader.load(self.current_network)
        except CatalogLoadError as exc:
            self.error_logger(ErrorCodes.CATALOG_LOAD_FAILED, exc.reason)
            self.event_bus.emit(Events.CATALOG_FAILED, {"error": exc.reason})
            return self.app_list
        self._remote_entries = list(remote)
        self._catalog_loaded = True
        self.event_bus.emit(Events.CATALOG_LOADED, {"count": len(self._remote_entries)})
        self.tracker.rebuild(self.candidates(), self.catalog_status)
        return self.app_list

    def sync(self) -> bool:
        """Seed the published list if it is still empty"""
        return self.tracker.sync(self.candidates(), self.catalog_status)

    async def network_changed(self) -> List[EntryRecord]:
        network = self.current_network
        self.event_bus.emit(Events.NETWORK_CHANGED, {"network": network})
        await self.refresh()
        if self.catalog_status != FetchStatus.SUCCESS:
            # The last good catalog was for another network.
            self.tracker.drop_unsupported(network)
        return self.app_list

    def toggle_pin(self, app_id: str) -> bool:
        return self.pin_store.toggle(app_id)

    def remove_app(self, key: str) -> bool:
        return self.custom_store.remove(key)

    async def add_custom_app(self, url: str) -> EntryRecord:
        """Resolve ``url`` and persist it as a custom app"""
        url = str(url or "").strip().rstrip("/")
        known = {str(entry.get("url") or "").strip().rstrip("/") for entry in self._remote_entries}
        known.update(entry.url.rstrip("/") for entry in self.custom_store.get())
        if url in known:
            raise DuplicateAppError(f"{url} is already in the app list")
        resolved = await self.resolver.resolve(url)
        entry = replace(resolved, url=url, custom=True)
        return self.custom_store.add(entry)

    def search(self, query: str) -> SearchOutcome:
        return search(self.tracker.published, query)

    async def wait_idle(self) -> None:
        await self.tracker.wait_idle()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "network": self.current_network,
            "apps": [entry.to_dict() for entry in self.app_list],
            "customApps": [entry.to_dict() for entry in self.custom_apps],
            "pinnedApps": [entry.to_dict() for entry in self.pinned_apps],
            "pinnedIds": self.pinned_ids,
            "isLoading": self.is_loading,
            "catalogStatus": self.catalog_status.value,
            "catalogError": getattr(self.catalog_loader, "last_error", "") or None,
        }

    def _on_custom_apps_changed(self, _data=None) -> None:
        if not self._catalog_loaded:
            return
        # Re-merge against the last good catalog, whatever the current fetch state.
        self.tracker.rebuild(self.candidates(), FetchStatus.SUCCESS)
