"""
Event Bus - Central event dispatching system
Provides decoupled communication between components
"""
from typing import Callable, Dict, List
import logging
import threading

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe event bus for component communication"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_type: str, callback: Callable):
        """Subscribe to an event type"""
        with self._lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []
            if callback not in self._subscribers[event_type]:
                self._subscribers[event_type].append(callback)

    def emit(self, event_type: str, data=None):
        """Emit an event to all subscribers"""
        with self._lock:
            callbacks = list(self._subscribers.get(event_type, []))
        for callback in callbacks:
            try:
                callback(data)
            except Exception:
                logger.exception("Error in event handler for %s", event_type)


# Event types
class Events:
    # Catalog events
    CATALOG_LOADING = "catalog_loading"
    CATALOG_LOADED = "catalog_loaded"
    CATALOG_FAILED = "catalog_failed"

    # App list events
    APP_LIST_PUBLISHED = "app_list_published"
    MANIFEST_RESOLVED = "manifest_resolved"
    MANIFEST_FAILED = "manifest_failed"

    # Persisted state events
    CUSTOM_APPS_CHANGED = "custom_apps_changed"
    PINS_CHANGED = "pins_changed"
    NETWORK_CHANGED = "network_changed"

    # Errors reported through the error log
    APP_ERROR = "app_error"
