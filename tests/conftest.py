"""Shared pytest fixtures."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from gqlcache import CacheStore, TransportRequest


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeTransport:
    """Transport that records requests and replays queued responses.

    Queued items are either JSON payloads or exceptions to raise. Once the
    queue is exhausted, ``default`` is returned.
    """

    def __init__(self, default: dict[str, Any] | None = None) -> None:
        self.default = default if default is not None else {"data": {"ok": True}}
        self.queue: list[dict[str, Any] | BaseException] = []
        self.requests: list[TransportRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def respond(self, *items: dict[str, Any] | BaseException) -> None:
        self.queue.extend(items)

    async def send(self, request: TransportRequest) -> dict[str, Any]:
        self.requests.append(request)
        await asyncio.sleep(0)  # Suspend like a real network call
        item = self.queue.pop(0) if self.queue else self.default
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock starting at t=0."""
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    """Create a fresh FakeTransport for each test."""
    return FakeTransport()


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    """Factory for extra transports within one test."""
    return FakeTransport


@pytest.fixture
def store(clock: FakeClock) -> CacheStore:
    """Create an empty CacheStore driven by the fake clock."""
    return CacheStore(clock=clock)

