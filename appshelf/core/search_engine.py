"""
Search Engine
Filters the published app list by a text query and ranks name matches first
"""
from dataclasses import dataclass, field
from typing import Iterable, List

from ..models.app_entry import EntryRecord

# Query offered to the user when nothing matches.
FALLBACK_SUGGESTION = "WalletConnect"


@dataclass
class SearchOutcome:
    results: List[EntryRecord] = field(default_factory=list)
    show_auxiliary_sections: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.results


def search(published: Iterable[EntryRecord], query: str) -> SearchOutcome:
    """
    Case-insensitive substring search over name and description.

    Name matches come before description-only matches; each group keeps the
    published order. Pinned/custom sections are hidden while a query is
    active. An empty or whitespace-only query returns everything as-is;
    otherwise the query is matched with its spaces intact.
    """
    entries = list(published)
    needle = (query or "").lower()
    if not needle.strip():
        return SearchOutcome(results=entries, show_auxiliary_sections=True)

    by_name: List[EntryRecord] = []
    by_description: List[EntryRecord] = []
    for entry in entries:
        if needle in entry.name.lower():
            by_name.append(entry)
        elif needle in entry.description.lower():
            by_description.append(entry)

    return SearchOutcome(results=by_name + by_description, show_auxiliary_sections=False)
