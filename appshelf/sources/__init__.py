from .manifest_resolver import BaseManifestResolver, HttpManifestResolver
from .remote_catalog import RemoteCatalogLoader, StaticCatalogLoader

__all__ = [
    "BaseManifestResolver",
    "HttpManifestResolver",
    "RemoteCatalogLoader",
    "StaticCatalogLoader",
]
