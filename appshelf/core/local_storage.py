from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional

from .error_log import ErrorCodes

logger = logging.getLogger(__name__)


class LocalStorage:
    """JSON-backed key-value storage shared by the custom app and pin stores."""

    def __init__(self, path: Optional[Path] = None, error_logger: Optional[Callable[[str, object], None]] = None):
        self._path = Path(path) if path is not None else None
        self._error_logger = error_logger
        self._lock = RLock()
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        with self._lock:
            if self._path is None or not self._path.exists():
                self._data = {}
                return
            try:
                payload = json.loads(self._path.read_text(encoding="utf-8"))
                self._data = payload if isinstance(payload, dict) else {}
            except (OSError, ValueError) as exc:
                if self._error_logger is not None:
                    self._error_logger(ErrorCodes.STORAGE_READ_FAILED, f"{self._path}: {exc}")
                else:
                    logger.error("Error loading local storage %s: %s", self._path, exc)
                self._data = {}

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")

    def get_item(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._data.get(key, default)
        # Hand out copies so callers never hold a reference into the store.
        return json.loads(json.dumps(value)) if value is not default else default

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = json.loads(json.dumps(value))
            self._save()
