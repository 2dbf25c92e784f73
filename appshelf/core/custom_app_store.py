from __future__ import annotations

from threading import RLock
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..models.app_entry import EntryRecord
from .errors import DuplicateAppError
from .event_bus import EventBus, Events
from .local_storage import LocalStorage


class CustomAppStore:
    """Persisted list of user-added apps, stored under a single storage key."""

    def __init__(self, storage: LocalStorage, storage_key: str = "customSafeApps", event_bus: Optional[EventBus] = None):
        self._storage = storage
        self._key = storage_key
        self._lock = RLock()
        self.event_bus = event_bus

    def get(self) -> List[EntryRecord]:
        raw = self._storage.get_item(self._key, [])
        if not isinstance(raw, list):
            return []
        out: List[EntryRecord] = []
        for item in raw:
            if isinstance(item, str):
                # Oldest format persisted bare urls.
                item = {"url": item}
            if not isinstance(item, Mapping):
                continue
            entry = EntryRecord.from_dict(item, custom=True)
            if entry.url:
                out.append(entry)
        return out

    def set(self, entries: Iterable[Union[EntryRecord, Dict[str, Any]]]) -> None:
        payload = []
        for entry in entries:
            record = entry if isinstance(entry, EntryRecord) else EntryRecord.from_dict(entry, custom=True)
            if not record.url:
                continue
            data = record.to_dict()
            data["custom"] = True
            payload.append(data)
        with self._lock:
            self._storage.set_item(self._key, payload)
        if self.event_bus is not None:
            self.event_bus.emit(Events.CUSTOM_APPS_CHANGED, {"count": len(payload)})

    def add(self, entry: EntryRecord) -> EntryRecord:
        with self._lock:
            current = self.get()
            url = entry.url.strip()
            if any(existing.url == url for existing in current):
                raise DuplicateAppError(f"{url} is already in your custom apps")
            self.set(current + [entry])
        return entry

    def remove(self, key: str) -> bool:
        """Drop custom apps matching ``key`` by id, or by url for id-less entries"""
        key = str(key or "").strip()
        if not key:
            return False
        with self._lock:
            current = self.get()
            kept = [entry for entry in current if not _matches(entry, key)]
            if len(kept) == len(current):
                return False
            self.set(kept)
            return True


def _matches(entry: EntryRecord, key: str) -> bool:
    if entry.id:
        return entry.id == key
    return entry.url == key
