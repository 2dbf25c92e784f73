"""
App Entry Model
Normalized shape of a mini-app directory entry with fetch lifecycle tracking
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..core.errors import InvalidTransitionError


UNKNOWN_NAME = "unknown"


class FetchStatus(Enum):
    """Metadata resolution status"""
    PENDING = "PENDING"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self in (FetchStatus.SUCCESS, FetchStatus.ERROR)


# Allowed forward moves; SUCCESS may be entered directly from PENDING.
_TRANSITIONS = {
    FetchStatus.PENDING: {FetchStatus.LOADING, FetchStatus.SUCCESS, FetchStatus.ERROR},
    FetchStatus.LOADING: {FetchStatus.SUCCESS, FetchStatus.ERROR},
    FetchStatus.SUCCESS: set(),
    FetchStatus.ERROR: set(),
}


def _normalize_networks(raw: Any) -> Optional[Tuple[str, ...]]:
    if raw is None:
        return None
    if isinstance(raw, (str, int)):
        raw = [raw]
    out = []
    for item in raw:
        text = str(item).strip()
        if text and text not in out:
            out.append(text)
    return tuple(out)


def _optional_id(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


@dataclass(frozen=True)
class EntryRecord:
    """Mini-app directory entry"""
    url: str
    name: str = ""
    id: Optional[str] = None
    icon_url: str = ""
    description: str = ""
    # None means the entry is available on every network.
    networks: Optional[Tuple[str, ...]] = None
    custom: bool = False
    fetch_status: FetchStatus = FetchStatus.PENDING
    error: Optional[str] = None
    provider: Optional[Dict[str, Any]] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], custom: Optional[bool] = None) -> "EntryRecord":
        """
        Build a full record from a loose mapping.

        Accepts catalog payloads (camelCase, numeric ids, ``chainIds``) as well
        as legacy custom entries that carry little more than a ``url``.
        """
        name = str(payload.get("name") or "").strip()
        resolved = bool(name) and name.lower() != UNKNOWN_NAME
        # Stored statuses are not trusted: a fresh record is either already
        # resolved or waiting for its manifest.
        status = FetchStatus.SUCCESS if resolved else FetchStatus.PENDING

        networks = payload.get("networks")
        if networks is None:
            networks = payload.get("chainIds")

        provider = payload.get("provider")
        return cls(
            url=str(payload.get("url") or "").strip(),
            name=name,
            id=_optional_id(payload.get("id")),
            icon_url=str(payload.get("iconUrl") or payload.get("icon_url") or "").strip(),
            description=str(payload.get("description") or "").strip(),
            networks=_normalize_networks(networks),
            custom=bool(payload.get("custom", False)) if custom is None else bool(custom),
            fetch_status=status,
            provider=dict(provider) if isinstance(provider, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "name": self.name,
            "iconUrl": self.icon_url,
            "description": self.description,
            "networks": list(self.networks) if self.networks is not None else None,
            "custom": self.custom,
            "fetchStatus": self.fetch_status.value,
            "error": self.error,
            "provider": self.provider,
        }

    @property
    def is_resolved(self) -> bool:
        """Whether display metadata is already known"""
        return bool(self.name) and self.name.lower() != UNKNOWN_NAME

    @property
    def key(self) -> str:
        """Identifier used by removal; legacy entries only have a url"""
        return self.id or self.url

    def supports_network(self, network_id: Any) -> bool:
        if self.networks is None:
            return True
        return str(network_id).strip() in self.networks

    def sort_key(self) -> str:
        return self.name.lower()

    def transition(self, status: FetchStatus, error: Optional[str] = None) -> "EntryRecord":
        """Return a copy moved forward to ``status``"""
        if status not in _TRANSITIONS[self.fetch_status]:
            raise InvalidTransitionError(
                f"Cannot move {self.url!r} from {self.fetch_status.value} to {status.value}"
            )
        return replace(self, fetch_status=status, error=error if status == FetchStatus.ERROR else None)


def sort_by_name(entries: Iterable[EntryRecord]) -> Tuple[EntryRecord, ...]:
    """Case-insensitive ascending name order; ties keep their current order"""
    return tuple(sorted(entries, key=EntryRecord.sort_key))
