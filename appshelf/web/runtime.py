"""Runtime bootstrap for the AppShelf web API."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.app_list_manager import AppListManager
from ..core.custom_app_store import CustomAppStore
from ..core.error_log import ErrorLogger
from ..core.event_bus import EventBus
from ..core.local_storage import LocalStorage
from ..core.pin_store import PinStore
from ..core.settings_manager import SettingsManager
from ..sources.manifest_resolver import BaseManifestResolver, HttpManifestResolver
from ..sources.remote_catalog import RemoteCatalogLoader


@dataclass
class AppShelfRuntime:
    """Shared service graph used by web endpoints."""

    settings: SettingsManager
    event_bus: EventBus
    storage: LocalStorage
    custom_store: CustomAppStore
    pin_store: PinStore
    manager: AppListManager


def build_runtime(
    settings_dir: Optional[Path] = None,
    catalog_loader=None,
    resolver: Optional[BaseManifestResolver] = None,
) -> AppShelfRuntime:
    """Create and wire core services."""

    settings = SettingsManager(settings_dir)
    event_bus = EventBus()
    error_logger = ErrorLogger(event_bus)
    storage = LocalStorage(settings.settings_dir / "storage.json", error_logger=error_logger)
    custom_store = CustomAppStore(
        storage,
        storage_key=str(settings.get("custom_apps_storage_key", "customSafeApps")),
        event_bus=event_bus,
    )
    pin_store = PinStore(
        storage,
        storage_key=str(settings.get("pinned_apps_storage_key", "pinnedSafeApps")),
        event_bus=event_bus,
    )
    manager = AppListManager(
        catalog_loader=catalog_loader or RemoteCatalogLoader(settings),
        custom_store=custom_store,
        pin_store=pin_store,
        resolver=resolver or HttpManifestResolver(settings),
        network_getter=settings.current_network,
        event_bus=event_bus,
        error_logger=error_logger,
    )

    return AppShelfRuntime(
        settings=settings,
        event_bus=event_bus,
        storage=storage,
        custom_store=custom_store,
        pin_store=pin_store,
        manager=manager,
    )
