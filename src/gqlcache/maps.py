"""Backing mappings for the cache store."""

from collections import OrderedDict
from collections.abc import Iterator, MutableMapping
from typing import TypeVar

K = TypeVar("K")
V = TypeVar("V")


class LRUMap(MutableMapping[K, V]):
    """In-memory mapping with optional LRU eviction.

    Pass one as ``CacheOptions(map=...)`` to bound how many responses a
    client keeps.
    """

    def __init__(self, max_items: int | None = None) -> None:
        if max_items is not None and max_items < 1:
            raise ValueError("max_items must be at least 1")
        self._items: OrderedDict[K, V] = OrderedDict()
        self._max_items = max_items

    @property
    def max_items(self) -> int | None:
        return self._max_items

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def peek(self, key: K, default: V | None = None) -> V | None:
        """Return a value without marking it as recently used."""
        return self._items.get(key, default)

    def __getitem__(self, key: K) -> V:
        value = self._items[key]
        self._items.move_to_end(key)  # LRU touch
        return value

    def __setitem__(self, key: K, value: V) -> None:
        self._items[key] = value
        self._items.move_to_end(key)
        if self._max_items and len(self._items) > self._max_items:
            self._items.popitem(last=False)

    def __delitem__(self, key: K) -> None:
        del self._items[key]

    def __iter__(self) -> Iterator[K]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()


__all__ = ["LRUMap"]
