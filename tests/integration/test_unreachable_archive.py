"""Integration tests against real sockets.

These open real connections to the loopback interface, so they exercise the
default httpx transport rather than a mock.
"""

from __future__ import annotations

import pytest

from archive_sentinel.health import check_archive_health

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_refused_connection_is_unhealthy() -> None:
    # Port 1 on loopback is closed on any normal test host.
    report = await check_archive_health(["http://127.0.0.1:1"], timeout=2.0)

    assert report.healthy == ()
    assert len(report.unhealthy) == 1
    target, reason = report.unhealthy[0]
    assert target == "http://127.0.0.1:1"
    assert reason.startswith("Connection failed:")
    assert report.summary() == "All 1 archive(s) unhealthy"


@pytest.mark.asyncio
async def test_unsupported_scheme_is_unhealthy() -> None:
    report = await check_archive_health(["ftp://127.0.0.1:1/archive"], timeout=2.0)

    assert report.all_healthy is False
    assert report.unhealthy[0][1].startswith("Connection failed:")
