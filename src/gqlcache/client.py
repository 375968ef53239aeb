"""Async GraphQL client with a TTL response cache.

Queries go through the cache: a fresh entry answers the call without
touching the network, a miss goes to the transport and an error-free
response is stored. Mutations always go to the transport and never read or
write the cache.

Concurrent identical queries are not coalesced. Both miss, both reach the
transport, and whichever finishes last owns the cache entry.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from types import MappingProxyType, TracebackType
from typing import Any

from gqlcache.config import CacheOptions, ClientOptions, merge_headers
from gqlcache.duration import parse_duration
from gqlcache.hooks import Hooks, call_hook
from gqlcache.keys import derive_cache_key
from gqlcache.store import CacheStore, Clock
from gqlcache.transport import HttpxTransport, Transport, TransportRequest
from gqlcache.types import (
    Duration,
    GraphQLResponse,
    Operation,
    RequestDescriptor,
    ResponseOutcome,
    SerializedEntry,
)

logger = logging.getLogger(__name__)

# Sentinel distinguishing "no override" from an explicit unbounded override
_DEFAULT: Any = object()


class GraphQLClient:
    """Async GraphQL client.

    Usage:
        async with GraphQLClient(
            "https://api.example.com/graphql",
            cache=CacheOptions(duration="5m"),
        ) as client:
            result = await client.query("{ hero { name } }")
            print(result.data)
    """

    def __init__(
        self,
        uri: str,
        *,
        method: str = "POST",
        transport: Transport | None = None,
        headers: Mapping[str, str] | None = None,
        credentials: str = "include",
        cache: CacheOptions | None = None,
        hooks: Hooks | None = None,
        clock: Clock | None = None,
    ) -> None:
        options = ClientOptions(
            uri=uri,
            method=method,
            transport=transport,
            headers=dict(headers or {}),
            credentials=credentials,
            cache=cache or CacheOptions(),
            hooks=hooks or Hooks(),
        )
        self._uri = options.uri
        self._method = options.method
        self._credentials = options.credentials
        self._headers = merge_headers(options.headers)
        self._hooks = options.hooks
        self._default_duration = options.cache.duration_ms()
        self._cache = _build_store(options.cache, clock)

        self._owns_transport = options.transport is None
        self._transport: Transport = options.transport or HttpxTransport()

    @classmethod
    def from_options(
        cls, options: ClientOptions, *, clock: Clock | None = None
    ) -> GraphQLClient:
        """Create a client from a ``ClientOptions`` instance."""
        return cls(
            options.uri,
            method=options.method,
            transport=options.transport,
            headers=options.headers,
            credentials=options.credentials,
            cache=options.cache,
            hooks=options.hooks,
            clock=clock,
        )

    @property
    def cache(self) -> CacheStore:
        """The response store backing this client."""
        return self._cache

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def headers(self) -> Mapping[str, str]:
        """Headers sent with every request, before per-call overrides."""
        return dict(self._headers)

    async def query(
        self,
        query: str,
        variables: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        cache_duration: Duration | None = _DEFAULT,
    ) -> GraphQLResponse:
        """Run a query, answering from the cache when possible.

        Args:
            query: GraphQL document, used verbatim for the cache key
            variables: JSON-serializable variables
            headers: Extra headers for this call only
            cache_duration: TTL for this response; ``None`` stores it without
                expiry. Defaults to the client's configured duration.

        Returns:
            The response. ``errors`` is ``None`` unless the server reported
            GraphQL errors, in which case nothing was cached.

        Raises:
            TransportError: The request failed at the network level.
        """
        if cache_duration is _DEFAULT:
            duration_ms = self._default_duration
        else:
            duration_ms = parse_duration(cache_duration)

        key = derive_cache_key(query, variables)
        request = self._prepare(query, variables, headers)
        descriptor = self._describe("query", request, duration_ms)
        await call_hook(self._hooks.request, descriptor)

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for query key %d", key)
            response = GraphQLResponse(data=cached, errors=None)
            await call_hook(
                self._hooks.response,
                ResponseOutcome(
                    request=descriptor,
                    data=copy.deepcopy(cached),
                    from_cache=True,
                    cache_key=key,
                ),
            )
            return response

        logger.debug("Cache miss for query key %d", key)
        response = await self._dispatch(descriptor, request, cache_key=key)

        if response.errors:
            logger.debug("Not caching query key %d: response has errors", key)
        elif response.data is None:
            logger.debug("Not caching query key %d: response has no data", key)
        else:
            self._cache.set(key, response.data, duration_ms)
            logger.debug("Cached query key %d (ttl=%s ms)", key, duration_ms)
        return response

    async def mutation(
        self,
        query: str,
        variables: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> GraphQLResponse:
        """Run a mutation. The cache is never consulted or written.

        Raises:
            TransportError: The request failed at the network level.
        """
        request = self._prepare(query, variables, headers)
        descriptor = self._describe("mutation", request, None)
        await call_hook(self._hooks.request, descriptor)
        return await self._dispatch(descriptor, request, cache_key=None)

    def clear_cache(self) -> None:
        """Remove every cached response."""
        self._cache.clear()

    def cache_to_json(self) -> list[SerializedEntry]:
        """Export the cache as JSON-compatible records for later hydration.

        Pass the result as ``CacheOptions(json_cache=...)`` to another client.
        """
        return self._cache.to_serializable()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    async def __aenter__(self) -> GraphQLClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _prepare(
        self, query: str, variables: Any, headers: Mapping[str, str] | None
    ) -> TransportRequest:
        """Build the outgoing request from the client's own copies of its inputs."""
        return TransportRequest(
            method=self._method,
            uri=self._uri,
            headers=merge_headers(self._headers, headers),
            body={"query": query, "variables": copy.deepcopy(variables)},
            credentials=self._credentials,
        )

    def _describe(
        self,
        operation: Operation,
        request: TransportRequest,
        duration_ms: int | None,
    ) -> RequestDescriptor:
        # Hooks get detached copies so they cannot rewrite what is sent or cached
        return RequestDescriptor(
            operation=operation,
            uri=request.uri,
            method=request.method,
            headers=MappingProxyType(dict(request.headers)),
            query=request.body["query"],
            variables=copy.deepcopy(request.body["variables"]),
            credentials=request.credentials,
            cache_duration=duration_ms,
        )

    async def _dispatch(
        self,
        descriptor: RequestDescriptor,
        request: TransportRequest,
        *,
        cache_key: int | None,
    ) -> GraphQLResponse:
        """Send a request through the transport and report it to the response hook."""
        try:
            payload = await self._transport.send(request)
        except Exception as e:
            await call_hook(
                self._hooks.response,
                ResponseOutcome(request=descriptor, error=e, cache_key=cache_key),
            )
            raise

        response = _to_response(payload)
        await call_hook(
            self._hooks.response,
            ResponseOutcome(
                request=descriptor,
                data=copy.deepcopy(response.data),
                errors=copy.deepcopy(response.errors),
                cache_key=cache_key,
            ),
        )
        return response


def _to_response(payload: Mapping[str, Any]) -> GraphQLResponse:
    """Split a GraphQL response body into data and errors."""
    errors = payload.get("errors")
    if errors is not None and not isinstance(errors, list):
        logger.warning("GraphQL response has non-list errors: %r", errors)
        errors = [errors]
    return GraphQLResponse(data=payload.get("data"), errors=errors or None)


def _build_store(options: CacheOptions, clock: Clock | None) -> CacheStore:
    """Create the client's store from its cache options.

    An injected map wins over a JSON snapshot.
    """
    if options.map is not None:
        if options.json_cache is not None:
            logger.debug("Both cache map and json_cache given; ignoring json_cache")
        return CacheStore(options.map, clock=clock)

    records = options.snapshot()
    if records is not None:
        return CacheStore.from_serializable(records, clock=clock)
    return CacheStore(clock=clock)


__all__ = ["GraphQLClient"]
