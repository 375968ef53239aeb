"""gqlcache - Async GraphQL client with a TTL response cache."""

# Client
from gqlcache.client import GraphQLClient

# Configuration
from gqlcache.config import CacheOptions, ClientOptions

# Duration parsing
from gqlcache.duration import parse_duration

# Errors
from gqlcache.errors import (
    CacheHydrationError,
    ConfigurationError,
    GraphQLCacheError,
    TransportError,
)
from gqlcache.hooks import Hooks

# Cache internals
from gqlcache.keys import derive_cache_key
from gqlcache.maps import LRUMap
from gqlcache.store import CacheStore

# Transports
from gqlcache.transport import HttpxTransport, Transport, TransportRequest

# Core types
from gqlcache.types import (
    CacheEntry,
    Duration,
    GraphQLResponse,
    RequestDescriptor,
    ResponseOutcome,
    SerializedEntry,
)

__version__ = "0.1.0"

__all__ = [
    "CacheEntry",
    "CacheHydrationError",
    "CacheOptions",
    "CacheStore",
    "ClientOptions",
    "ConfigurationError",
    "Duration",
    "GraphQLCacheError",
    "GraphQLClient",
    "GraphQLResponse",
    "Hooks",
    "HttpxTransport",
    "LRUMap",
    "RequestDescriptor",
    "ResponseOutcome",
    "SerializedEntry",
    "Transport",
    "TransportError",
    "TransportRequest",
    "derive_cache_key",
    "parse_duration",
]
