"""
Error Log
Fire-and-forget error reporting for non-fatal failures
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from .event_bus import EventBus, Events

logger = logging.getLogger(__name__)


class ErrorCodes:
    MANIFEST_RESOLUTION_FAILED = "MANIFEST_RESOLUTION_FAILED"
    CATALOG_LOAD_FAILED = "CATALOG_LOAD_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"


class ErrorLogger:
    """Logs ``(code, detail)`` pairs and mirrors them on the event bus"""

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus

    def __call__(self, code: str, detail: Any = None) -> None:
        if code == ErrorCodes.CATALOG_LOAD_FAILED:
            logger.error("%s: %s", code, detail)
        else:
            logger.warning("%s: %s", code, detail)
        if self.event_bus is not None:
            self.event_bus.emit(Events.APP_ERROR, {"code": code, "detail": detail})
