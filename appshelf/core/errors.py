"""
Errors
Failure types raised across the app directory
"""
from typing import Optional


class AppShelfError(Exception):
    """Base error for the app directory"""


class ManifestResolutionError(AppShelfError):
    """Manifest for a single entry could not be fetched or parsed"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


class CatalogLoadError(AppShelfError):
    """Remote catalog could not be loaded"""

    def __init__(self, reason: str, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class DuplicateAppError(AppShelfError, ValueError):
    """Custom app url already present in the directory"""


class InvalidTransitionError(AppShelfError, ValueError):
    """Fetch status moved backwards"""
