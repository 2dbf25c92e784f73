from __future__ import annotations

from threading import RLock
from typing import Iterable, List, Optional

from .event_bus import EventBus, Events
from .local_storage import LocalStorage


def _dedupe(ids: Iterable) -> List[str]:
    out: List[str] = []
    for item in ids:
        text = str(item).strip()
        if text and text not in out:
            out.append(text)
    return out


class PinStore:
    """Persisted, ordered, duplicate-free list of pinned app ids."""

    def __init__(self, storage: LocalStorage, storage_key: str = "pinnedSafeApps", event_bus: Optional[EventBus] = None):
        self._storage = storage
        self._key = storage_key
        self._lock = RLock()
        self.event_bus = event_bus

    def get(self) -> List[str]:
        raw = self._storage.get_item(self._key, [])
        if not isinstance(raw, list):
            return []
        return _dedupe(raw)

    def set(self, ids: Iterable) -> None:
        ids = _dedupe(ids)
        with self._lock:
            self._storage.set_item(self._key, ids)
        if self.event_bus is not None:
            self.event_bus.emit(Events.PINS_CHANGED, {"pinned": list(ids)})

    def toggle(self, app_id: str) -> bool:
        """Flip the pin state of ``app_id``; returns the new state"""
        app_id = str(app_id).strip()
        with self._lock:
            ids = self.get()
            if app_id in ids:
                ids.remove(app_id)
                pinned = False
            else:
                ids.append(app_id)
                pinned = True
            self.set(ids)
        return pinned
