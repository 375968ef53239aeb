"""Core types for the gqlcache client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, TypedDict

Operation = Literal["query", "mutation"]

# Duration type alias
Duration = str | int  # "30s", "5m", "2h", "1d" or milliseconds


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached response payload with its expiry."""

    key: int
    value: Any
    expires_at: int | None  # Unix timestamp ms, None never expires


class SerializedEntry(TypedDict):
    """Flat record form of a cache entry, as produced by ``cache_to_json``."""

    key: int
    value: Any
    expires_at: int | None


@dataclass(frozen=True, slots=True)
class GraphQLResponse:
    """Result of a query or mutation.

    ``errors`` is ``None`` when the server reported none, including every
    response served from the cache.
    """

    data: Any
    errors: list[Any] | None = None


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """What the request hook sees before any cache or network action."""

    operation: Operation
    uri: str
    method: str
    headers: Mapping[str, str]
    query: str
    variables: Any = None
    credentials: str = "include"
    cache_duration: int | None = None


@dataclass(frozen=True, slots=True)
class ResponseOutcome:
    """What the response hook sees once a call has completed."""

    request: RequestDescriptor
    data: Any = None
    errors: list[Any] | None = None
    error: BaseException | None = None
    from_cache: bool = False
    cache_key: int | None = None
