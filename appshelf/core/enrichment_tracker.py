"""
Enrichment Tracker
Resolves missing app metadata from manifests and republishes the sorted list
after every individual resolution
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..models.app_entry import EntryRecord, FetchStatus, sort_by_name
from ..sources.manifest_resolver import BaseManifestResolver
from .error_log import ErrorCodes
from .errors import ManifestResolutionError
from .event_bus import EventBus, Events

logger = logging.getLogger(__name__)


class EnrichmentTracker:
    """
    Owns the published app list.

    The list is an immutable snapshot. Every change (seed, resolution, rebuild)
    builds a new tuple from the latest snapshot and swaps it in without an
    ``await`` in between, so concurrent resolutions never lose each other's
    updates. Must be driven from a running event loop when entries need
    resolving.
    """

    def __init__(
        self,
        resolver: BaseManifestResolver,
        error_logger: Optional[Callable[[str, object], None]] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self._resolver = resolver
        self._error_logger = error_logger
        self.event_bus = event_bus
        self._published: Tuple[EntryRecord, ...] = ()
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def published(self) -> List[EntryRecord]:
        return list(self._published)

    def sync(self, candidates: Iterable[EntryRecord], catalog_status: FetchStatus) -> bool:
        """
        Seed the published list once the catalog is available.

        Returns True when a seed happened. Calling this again while a list is
        already published does nothing.
        """
        if catalog_status != FetchStatus.SUCCESS:
            return False
        if self._published:
            return False
        self._seed(list(candidates))
        return True

    def rebuild(self, candidates: Iterable[EntryRecord], catalog_status: FetchStatus) -> bool:
        """
        Seed the published list again from new candidates.

        Entries that already reached SUCCESS or ERROR under the same url and
        source are carried over instead of being resolved a second time.
        """
        if catalog_status != FetchStatus.SUCCESS:
            return False
        self._seed(list(candidates))
        return True

    async def wait_idle(self) -> None:
        """Wait until every in-flight resolution has been applied"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    def drop_unsupported(self, network_id) -> None:
        """Remove published entries that do not run on ``network_id``"""
        current = self._published
        kept = tuple(entry for entry in current if entry.supports_network(network_id))
        if len(kept) != len(current):
            self._publish(kept)

    def _seed(self, candidates: List[EntryRecord]) -> None:
        previous = {entry.url: entry for entry in self._published}
        seeded: List[EntryRecord] = []
        to_resolve: List[EntryRecord] = []
        for entry in candidates:
            earlier = previous.get(entry.url)
            if (
                not entry.is_resolved
                and earlier is not None
                and earlier.fetch_status.is_terminal
                and earlier.custom == entry.custom
            ):
                # Already resolved (or failed) for this source; keep that outcome.
                seeded.append(
                    replace(
                        earlier,
                        id=entry.id or earlier.id,
                        networks=entry.networks if entry.networks is not None else earlier.networks,
                    )
                )
                continue
            if entry.is_resolved:
                if entry.fetch_status != FetchStatus.SUCCESS:
                    entry = entry.transition(FetchStatus.SUCCESS)
                seeded.append(entry)
                continue
            if entry.fetch_status == FetchStatus.PENDING:
                entry = entry.transition(FetchStatus.LOADING)
            seeded.append(entry)
            if entry.fetch_status == FetchStatus.LOADING:
                to_resolve.append(entry)

        self._publish(sort_by_name(seeded))

        for entry in to_resolve:
            if entry.url in self._tasks:
                # A resolution from a previous seed is still running; its
                # result lands on this snapshot instead.
                continue
            task = asyncio.create_task(self._resolve(entry.url))
            self._tasks[entry.url] = task

    async def _resolve(self, url: str) -> None:
        try:
            resolved = await self._resolver.resolve(url)
            if not resolved.is_resolved:
                raise ManifestResolutionError(url, "Manifest does not define a name")
        except ManifestResolutionError as exc:
            self._fail(url, exc.reason)
        except Exception as exc:
            self._fail(url, str(exc) or exc.__class__.__name__)
        else:
            self._apply(url, lambda current: _merge_resolved(current, resolved))
            if self.event_bus is not None:
                self.event_bus.emit(Events.MANIFEST_RESOLVED, {"url": url})
        finally:
            self._tasks.pop(url, None)

    def _fail(self, url: str, reason: str) -> None:
        if self._error_logger is not None:
            self._error_logger(ErrorCodes.MANIFEST_RESOLUTION_FAILED, f"{url}: {reason}")
        self._apply(url, lambda current: current.transition(FetchStatus.ERROR, error=reason))
        if self.event_bus is not None:
            self.event_bus.emit(Events.MANIFEST_FAILED, {"url": url, "error": reason})

    def _apply(self, url: str, build: Callable[[EntryRecord], EntryRecord]) -> None:
        current = self._published
        index = next((i for i, entry in enumerate(current) if entry.url == url), None)
        if index is None:
            logger.debug("Discarding manifest result for %s; app no longer listed", url)
            return
        if current[index].fetch_status.is_terminal:
            return
        updated = list(current)
        updated[index] = build(current[index])
        self._publish(sort_by_name(updated))

    def _publish(self, entries: Tuple[EntryRecord, ...]) -> None:
        self._published = entries
        if self.event_bus is not None:
            self.event_bus.emit(Events.APP_LIST_PUBLISHED, list(entries))


def _merge_resolved(current: EntryRecord, resolved: EntryRecord) -> EntryRecord:
    # Identity (url, custom flag) stays with the listed entry; metadata comes
    # from the manifest.
    return replace(
        current.transition(FetchStatus.SUCCESS),
        name=resolved.name,
        id=current.id or resolved.id,
        icon_url=resolved.icon_url or current.icon_url,
        description=resolved.description or current.description,
        networks=resolved.networks if resolved.networks is not None else current.networks,
        provider=resolved.provider if resolved.provider is not None else current.provider,
    )
