"""Shared pytest fixtures for Archive Sentinel tests.

Archive servers are simulated with ``httpx.MockTransport``. The
``archive_transport`` fixture returns a factory that maps
``"{host}{path}"`` keys to a response behavior:

- an ``int``: respond with that status code
- an exception *class* from httpx: raise it for the request
- a ``float`` delay paired with a status, e.g. ``(2.0, 200)``: sleep, then respond

Requests that match no key get ``404``. Every request seen is recorded on
``transport.requests`` so tests can assert which endpoints were hit, and
``transport.peak_in_flight`` counts the most requests handled at once.

Usage::

    def test_example(archive_transport):
        transport = archive_transport({
            "archive-a.test/.well-known/stellar-history.json": 404,
            "archive-a.test/": 200,
        })
        report = await check_archive_health(["http://archive-a.test"], transport=transport)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Iterator, Mapping

import httpx
import pytest

RouteBehavior = int | type[httpx.RequestError] | tuple[float, int]


class ArchiveTransport(httpx.MockTransport):
    """Mock transport that routes requests by host and path and records them."""

    def __init__(self, routes: Mapping[str, RouteBehavior], default_status: int = 404) -> None:
        self.routes = dict(routes)
        self.default_status = default_status
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        super().__init__(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            return await self._respond(request)
        finally:
            self.in_flight -= 1

    async def _respond(self, request: httpx.Request) -> httpx.Response:
        behavior = self.routes.get(f"{request.url.host}{request.url.path}", self.default_status)

        if isinstance(behavior, tuple):
            delay, status = behavior
            await asyncio.sleep(delay)
            return httpx.Response(status)
        if isinstance(behavior, type) and issubclass(behavior, httpx.RequestError):
            raise behavior("simulated transport failure", request=request)
        return httpx.Response(behavior)

    def paths_for(self, host: str) -> list[str]:
        """Return the request paths seen for a host, in order."""
        return [r.url.path for r in self.requests if r.url.host == host]


@pytest.fixture
def archive_transport() -> Callable[..., ArchiveTransport]:
    """Factory fixture building an ArchiveTransport from a route table."""

    def _factory(routes: Mapping[str, RouteBehavior], default_status: int = 404) -> ArchiveTransport:
        return ArchiveTransport(routes, default_status=default_status)

    return _factory


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove every ARCHIVE_SENTINEL_* variable and stop .env loading."""
    for key in list(os.environ):
        if key.startswith("ARCHIVE_SENTINEL_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("archive_sentinel.config.load_dotenv", lambda *a, **kw: False)
    yield


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    """Snapshot and restore logger handlers and levels touched by setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    levels = {name: logging.getLogger(name).level for name in ("", "archive_sentinel", "httpx")}
    yield root
    root.handlers[:] = handlers
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)

