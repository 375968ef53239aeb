"""Client configuration."""

from __future__ import annotations

import json
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field

from gqlcache.duration import parse_duration
from gqlcache.errors import ConfigurationError
from gqlcache.hooks import Hooks
from gqlcache.transport import Transport
from gqlcache.types import CacheEntry, Duration, SerializedEntry

DEFAULT_METHOD = "POST"
DEFAULT_CREDENTIALS = "include"
DEFAULT_HEADERS: Mapping[str, str] = {"Content-Type": "application/json"}

_METHODS = frozenset({"GET", "POST"})
_CREDENTIALS = frozenset({"include", "same-origin", "omit"})


@dataclass(slots=True)
class CacheOptions:
    """Cache settings.

    Attributes:
        duration: Default time to live for query responses. ``None`` keeps
            entries until the cache is cleared.
        map: Backing mapping for the store. Share one between clients to
            share their cache. Takes precedence over ``json_cache``.
        json_cache: A ``cache_to_json()`` snapshot (records or a JSON string)
            used to hydrate a fresh store.
    """

    duration: Duration | None = None
    map: MutableMapping[int, CacheEntry] | None = None
    json_cache: Sequence[SerializedEntry] | str | None = None

    def duration_ms(self) -> int | None:
        try:
            return parse_duration(self.duration)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def snapshot(self) -> list[SerializedEntry] | None:
        """Decode ``json_cache`` into records."""
        if self.json_cache is None:
            return None
        if isinstance(self.json_cache, str):
            try:
                records = json.loads(self.json_cache)
            except ValueError as e:
                raise ConfigurationError(f"json_cache is not valid JSON: {e}") from e
        else:
            records = self.json_cache
        if not isinstance(records, Sequence) or isinstance(records, str):
            raise ConfigurationError("json_cache must be a list of cache records")
        return list(records)


@dataclass(slots=True)
class ClientOptions:
    """Everything a ``GraphQLClient`` can be configured with."""

    uri: str
    method: str = DEFAULT_METHOD
    transport: Transport | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    credentials: str = DEFAULT_CREDENTIALS
    cache: CacheOptions = field(default_factory=CacheOptions)
    hooks: Hooks = field(default_factory=Hooks)

    def __post_init__(self) -> None:
        if not self.uri:
            raise ConfigurationError("uri is required")
        self.method = self.method.upper()
        if self.method not in _METHODS:
            raise ConfigurationError(
                f"method must be one of {sorted(_METHODS)}, got {self.method!r}"
            )
        if self.credentials not in _CREDENTIALS:
            raise ConfigurationError(
                f"credentials must be one of {sorted(_CREDENTIALS)}, "
                f"got {self.credentials!r}"
            )
        # Fail fast on a bad duration
        self.cache.duration_ms()


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings left to right, later layers winning.

    Names compare case-insensitively; the spelling of the last layer to set
    a header is kept.
    """
    merged: dict[str, tuple[str, str]] = {}
    for layer in (DEFAULT_HEADERS, *layers):
        if not layer:
            continue
        for name, value in layer.items():
            merged[name.lower()] = (name, value)
    return dict(merged.values())


__all__ = [
    "DEFAULT_CREDENTIALS",
    "DEFAULT_HEADERS",
    "DEFAULT_METHOD",
    "CacheOptions",
    "ClientOptions",
    "merge_headers",
]
