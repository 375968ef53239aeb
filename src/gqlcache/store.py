"""TTL-aware response store.

Entries expire lazily: an expired entry stays in the backing mapping until
the next ``get`` for its key notices it, but it is never returned.

Values are copied on the way in and on the way out, so callers never share
objects with the stored entries.
"""

from __future__ import annotations

import copy
import logging
import time
from collections.abc import Callable, Iterable, MutableMapping
from typing import Any

from gqlcache.duration import parse_duration
from gqlcache.errors import CacheHydrationError
from gqlcache.maps import LRUMap
from gqlcache.types import CacheEntry, Duration, SerializedEntry

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


class CacheStore:
    """Mapping from cache key to response data with per-entry expiry.

    The backing mapping is pluggable. Anything supporting point lookup,
    insertion, iteration and removal works; pass the same mapping to several
    stores to share entries between clients.
    """

    def __init__(
        self,
        backing: MutableMapping[int, CacheEntry] | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._entries: MutableMapping[int, CacheEntry] = (
            backing if backing is not None else {}
        )
        self._clock = clock or wall_clock

    @property
    def backing(self) -> MutableMapping[int, CacheEntry]:
        """The mapping holding the entries."""
        return self._entries

    def _is_expired(self, entry: CacheEntry) -> bool:
        """Check if entry has reached its expiry."""
        if entry.expires_at is None:
            return False
        return self._clock() >= entry.expires_at

    def _peek(self, key: Any) -> CacheEntry | None:
        """Read an entry without counting as a use of it."""
        if isinstance(self._entries, LRUMap):
            return self._entries.peek(key)
        return self._entries.get(key)

    def get(self, key: int) -> Any | None:
        """Return a copy of the stored value, or ``None`` when absent or expired."""
        entry = self._peek(key)
        if entry is None:
            return None
        if self._is_expired(entry):
            self._entries.pop(key, None)
            logger.debug("Evicted expired cache entry %d", key)
            return None
        # Fresh hits count as a use for recency-ordered maps
        return copy.deepcopy(self._entries[key].value)

    def set(self, key: int, value: Any, duration: Duration | None = None) -> None:
        """Store a value, replacing any entry for the key.

        ``duration`` uses the ``parse_duration`` grammar; ``None`` keeps the
        entry until it is cleared.
        """
        ttl_ms = parse_duration(duration)
        expires_at = self._clock() + ttl_ms if ttl_ms is not None else None
        self._entries[key] = CacheEntry(
            key=key, value=copy.deepcopy(value), expires_at=expires_at
        )

    def delete(self, key: int) -> None:
        """Remove one entry if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._peek(key)
        return entry is not None and not self._is_expired(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def to_serializable(self) -> list[SerializedEntry]:
        """Snapshot every entry as a flat JSON-compatible record.

        Expired entries that have not been evicted yet are included.
        """
        return [
            {
                "key": entry.key,
                "value": copy.deepcopy(entry.value),
                "expires_at": entry.expires_at,
            }
            for entry in map(self._peek, list(self._entries))
            if entry is not None
        ]

    def load(self, records: Iterable[SerializedEntry]) -> int:
        """Insert serialized records, returning how many were loaded.

        Expiry is not checked here; expired records are dropped on their
        next lookup.
        """
        count = 0
        for record in records:
            entry = _deserialize_entry(record)
            self._entries[entry.key] = entry
            count += 1
        return count

    @classmethod
    def from_serializable(
        cls,
        records: Iterable[SerializedEntry],
        backing: MutableMapping[int, CacheEntry] | None = None,
        *,
        clock: Clock | None = None,
    ) -> CacheStore:
        """Build a store from a ``to_serializable`` snapshot."""
        store = cls(backing, clock=clock)
        count = store.load(records)
        logger.debug("Hydrated cache store with %d entries", count)
        return store


def _deserialize_entry(record: Any) -> CacheEntry:
    """Validate a flat record and turn it back into a cache entry."""
    if not isinstance(record, dict):
        raise CacheHydrationError(f"Cache record must be an object, got {record!r}")
    try:
        key = record["key"]
        value = record["value"]
    except KeyError as e:
        raise CacheHydrationError(f"Cache record is missing {e.args[0]!r}") from e
    expires_at = record.get("expires_at")

    if isinstance(key, bool) or not isinstance(key, int):
        raise CacheHydrationError(f"Cache key must be an integer, got {key!r}")
    if expires_at is not None and (
        isinstance(expires_at, bool) or not isinstance(expires_at, int | float)
    ):
        raise CacheHydrationError(
            f"Cache expiry must be a timestamp or null, got {expires_at!r}"
        )

    return CacheEntry(
        key=key,
        value=copy.deepcopy(value),
        expires_at=int(expires_at) if expires_at is not None else None,
    )


__all__ = ["CacheStore", "wall_clock"]
