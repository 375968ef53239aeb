"""Cache key derivation.

A key is an unsigned 32-bit CRC of the query text followed by the canonical
JSON form of its variables. Keys are compact but not unique: past a few
thousand distinct entries collisions become likely, and a colliding write
simply replaces the older entry.
"""

import json
import zlib
from collections.abc import Mapping
from typing import Any

KEY_BITS = 32
MAX_KEY = (1 << KEY_BITS) - 1


def serialize_variables(variables: Any) -> str:
    """Serialize variables canonically for hashing.

    Object keys are sorted at every depth, so ``{"a": 1, "b": 2}`` and
    ``{"b": 2, "a": 1}`` serialize identically. ``None`` and an empty mapping
    both serialize to the empty string.
    """
    if variables is None:
        return ""
    if isinstance(variables, Mapping) and not variables:
        return ""
    return json.dumps(
        variables,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def derive_cache_key(query: str, variables: Any = None) -> int:
    """Derive the cache key for a query and its variables.

    The query text is used exactly as given, so whitespace differences yield
    different keys.
    """
    payload = query + serialize_variables(variables)
    return zlib.crc32(payload.encode("utf-8", "surrogatepass")) & MAX_KEY


__all__ = ["KEY_BITS", "MAX_KEY", "derive_cache_key", "serialize_variables"]
