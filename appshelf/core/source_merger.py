"""
Source Merger
Combines catalog apps, custom apps, and the current network into one candidate list
"""
from typing import Any, Iterable, List, Mapping, Union

from ..models.app_entry import EntryRecord

EntryLike = Union[EntryRecord, Mapping[str, Any]]


def _to_record(entry: EntryLike, custom: bool) -> EntryRecord:
    if isinstance(entry, EntryRecord):
        # Re-normalize so records that went through storage or a previous
        # publish come back with a fresh status.
        entry = entry.to_dict()
    return EntryRecord.from_dict(entry, custom=custom)


def merge(remote_entries: Iterable[EntryLike], custom_entries: Iterable[EntryLike], current_network: Any) -> List[EntryRecord]:
    """
    Merge catalog and custom apps for ``current_network``.

    Catalog apps win over custom apps sharing the same url, so an app that
    graduated from custom to official shows up only once. Apps declaring
    ``networks`` without the current one are dropped. The first catalog
    occurrence of a url wins when the catalog itself repeats one.
    """
    remote = [_to_record(entry, custom=False) for entry in remote_entries]
    remote_urls = {entry.url for entry in remote}
    custom = [
        record
        for record in (_to_record(entry, custom=True) for entry in custom_entries)
        if record.url not in remote_urls
    ]

    merged: List[EntryRecord] = []
    seen = set()
    for record in remote + custom:
        if not record.url or record.url in seen:
            continue
        if not record.supports_network(current_network):
            continue
        seen.add(record.url)
        merged.append(record)
    return merged
