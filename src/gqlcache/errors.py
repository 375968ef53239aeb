"""Exceptions raised by gqlcache."""


class GraphQLCacheError(Exception):
    """Base class for every gqlcache error."""


class ConfigurationError(GraphQLCacheError, ValueError):
    """Raised when client options are invalid."""


class CacheHydrationError(GraphQLCacheError, ValueError):
    """Raised when a serialized cache snapshot cannot be loaded."""


class TransportError(GraphQLCacheError):
    """A network-level failure: connectivity, non-2xx status or a non-JSON body.

    GraphQL errors returned inside a successful response are not transport
    errors; they come back on ``GraphQLResponse.errors``.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
