"""Network transports.

The client only needs something that takes a ``TransportRequest`` and either
returns the decoded JSON body or raises. ``HttpxTransport`` is the default.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, cast, runtime_checkable

import httpx

from gqlcache.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransportRequest:
    """A single GraphQL request as handed to a transport."""

    method: str
    uri: str
    headers: Mapping[str, str]
    body: dict[str, Any]
    credentials: str = "include"


@runtime_checkable
class Transport(Protocol):
    """Async transport interface."""

    async def send(self, request: TransportRequest) -> dict[str, Any]:
        """Perform the request and return the decoded JSON response body."""
        ...


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    POST requests carry the body as JSON. GET requests put ``query`` and the
    JSON-encoded ``variables`` in the query string.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, request: TransportRequest) -> dict[str, Any]:
        """Send the request, raising ``TransportError`` on any HTTP-level failure."""
        kwargs: dict[str, Any] = {"headers": dict(request.headers)}
        if request.method == "GET":
            kwargs["params"] = _query_params(request.body)
        else:
            kwargs["json"] = request.body

        logger.debug("Sending GraphQL %s request to %s", request.method, request.uri)
        try:
            response = await self._client.request(request.method, request.uri, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {request.uri} failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code} from {request.uri}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                f"Response from {request.uri} is not valid JSON",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(payload, dict):
            raise TransportError(
                f"Response from {request.uri} is not a JSON object",
                status_code=response.status_code,
                body=response.text,
            )
        return cast(dict[str, Any], payload)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()


def _query_params(body: Mapping[str, Any]) -> dict[str, str]:
    """Encode a GraphQL body as URL parameters for GET requests."""
    params = {"query": body["query"]}
    variables = body.get("variables")
    if variables is not None:
        params["variables"] = json.dumps(variables, separators=(",", ":"))
    return params


__all__ = ["HttpxTransport", "Transport", "TransportRequest"]
