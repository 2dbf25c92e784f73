"""
Settings Manager
Handles persistent application settings in user home directory
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
import threading

logger = logging.getLogger(__name__)


def default_data_dir() -> Path:
    data_dir = str(os.environ.get("APPSHELF_DATA_DIR", "") or "").strip()
    return Path(data_dir).expanduser() if data_dir else (Path.home() / ".appshelf")


class SettingsManager:
    """Manages application settings with persistence"""

    DEFAULT_SETTINGS = {
        # Catalog
        "catalog_url": "https://safe-client.gnosis.io/v1/chains/{network}/safe-apps",
        "catalog_request_timeout_seconds": 12.0,

        # Manifests
        "manifest_request_timeout_seconds": 10.0,

        # Network
        "network_id": "1",

        # Local storage keys
        "custom_apps_storage_key": "customSafeApps",
        "pinned_apps_storage_key": "pinnedSafeApps",
    }

    def __init__(self, settings_dir: Optional[Path] = None):
        self.settings_dir = Path(settings_dir) if settings_dir is not None else default_data_dir()
        self.settings_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file = self.settings_dir / "settings.json"

        self._lock = threading.RLock()
        self._settings: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load settings from file"""
        with self._lock:
            if self.settings_file.exists():
                try:
                    with open(self.settings_file, "r", encoding="utf-8") as f:
                        loaded = json.load(f)
                    if not isinstance(loaded, dict):
                        loaded = {}
                    # Merge with defaults (adds new keys if they don't exist)
                    self._settings = {**self.DEFAULT_SETTINGS, **loaded}
                except (OSError, ValueError) as e:
                    logger.error("Error loading settings: %s", e)
                    self._settings = self.DEFAULT_SETTINGS.copy()
            else:
                self._settings = self.DEFAULT_SETTINGS.copy()
            self._settings["network_id"] = str(self._settings.get("network_id") or "").strip() or "1"

    def _save(self):
        """Save settings to file"""
        with self._lock:
            try:
                with open(self.settings_file, "w", encoding="utf-8") as f:
                    json.dump(self._settings, f, indent=2)
            except OSError as e:
                logger.error("Error saving settings: %s", e)

    def get(self, key: str, default=None) -> Any:
        """Get a setting value"""
        with self._lock:
            return self._settings.get(key, default)

    def set(self, key: str, value: Any):
        """Set a setting value and save"""
        with self._lock:
            self._settings[str(key)] = value
            self._save()

    def update(self, settings_dict: Dict[str, Any]):
        """Update multiple settings at once"""
        with self._lock:
            self._settings.update(dict(settings_dict or {}))
            self._save()

    def get_all(self) -> Dict[str, Any]:
        """Get all settings"""
        with self._lock:
            return self._settings.copy()

    def reset(self):
        """Reset to default settings"""
        with self._lock:
            self._settings = self.DEFAULT_SETTINGS.copy()
            self._save()

    def current_network(self) -> str:
        return str(self.get("network_id", "1") or "1")
