"""Request/response observer hooks."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from gqlcache.types import RequestDescriptor, ResponseOutcome

logger = logging.getLogger(__name__)

RequestHook = Callable[[RequestDescriptor], Awaitable[None] | None]
ResponseHook = Callable[[ResponseOutcome], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class Hooks:
    """Optional observers called around every query and mutation.

    Hooks may be plain functions or coroutine functions. Their return values
    are ignored, and an exception raised by a hook is logged rather than
    propagated, so a hook can never change the outcome of a call.
    """

    request: RequestHook | None = None
    response: ResponseHook | None = None


async def call_hook(hook: Callable[[Any], Any] | None, payload: Any) -> None:
    """Invoke a hook, awaiting it if needed and logging any failure."""
    if hook is None:
        return
    try:
        result = hook(payload)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.warning("GraphQL hook %r raised", hook, exc_info=True)


__all__ = ["Hooks", "RequestHook", "ResponseHook", "call_hook"]
