"""Concurrent health checks for a set of history archives.

Every archive is probed concurrently over one shared HTTP client. The call
returns only after every probe has finished, and one archive's failure never
delays, cancels or changes the verdict for another. Per-archive failures are
recorded in the returned ``HealthReport``; the only error raised to the
caller is ``ClientConfigurationError`` when the client cannot be built.

Usage:
    from archive_sentinel.health import check_archive_health

    report = await check_archive_health(
        ["https://history.stellar.org/prd/core-live/core_live_001"],
        timeout=5.0,
    )
    if not report.all_healthy:
        logger.warning("%s\\n%s", report.summary(), report.error_details())
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import httpx

from archive_sentinel import __version__
from archive_sentinel.backoff import BackoffConfig
from archive_sentinel.errors import ClientConfigurationError
from archive_sentinel.logging import get_logger
from archive_sentinel.models import HealthReport, ProbeOutcome
from archive_sentinel.probe import probe_archive

if TYPE_CHECKING:
    from archive_sentinel.config import Config

logger = get_logger(__name__)

DEFAULT_CHECK_TIMEOUT = 10.0
"""Seconds allowed for each probe step when the caller gives no timeout."""

DEFAULT_USER_AGENT = f"archive-sentinel/{__version__}"


def _validate_timeout(timeout: object) -> float:
    if isinstance(timeout, bool) or not isinstance(timeout, int | float):
        raise ClientConfigurationError(
            f"timeout must be a number of seconds, got {type(timeout).__name__}"
        )
    if not math.isfinite(timeout) or timeout <= 0:
        raise ClientConfigurationError(f"timeout must be a positive number, got {timeout}")
    return float(timeout)


def build_client(
    timeout: float,
    user_agent: str = DEFAULT_USER_AGENT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the HTTP client shared by all probes of one check.

    Args:
        timeout: Per-request timeout in seconds. Must be positive and finite.
        user_agent: Value of the ``User-Agent`` header sent with every probe.
        transport: Optional transport override (used by tests).

    Returns:
        An unopened ``httpx.AsyncClient``; use it as an async context manager.

    Raises:
        ClientConfigurationError: If the timeout or user agent is invalid, or
            httpx rejects the client configuration.
    """
    timeout = _validate_timeout(timeout)
    if not isinstance(user_agent, str) or not user_agent.strip():
        raise ClientConfigurationError("user_agent must be a non-empty string")

    try:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            # Uncapped so a probe never queues for a connection held by a slow sibling.
            limits=httpx.Limits(max_connections=None),
            transport=transport,
        )
    except (TypeError, ValueError) as e:
        raise ClientConfigurationError(f"Could not create HTTP client: {e}") from e


async def _probe_isolated(
    client: httpx.AsyncClient,
    target: str,
    timeout: float,
) -> ProbeOutcome:
    """Run one probe, turning any unexpected exception into an unhealthy outcome."""
    try:
        return await probe_archive(client, target, timeout)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        # INTENTIONAL BROAD CATCH: a bug while probing one archive must not
        # abort the gather or hide the verdicts of the others.
        logger.error(
            "Unexpected error probing archive %s: %s: %s",
            target,
            type(e).__name__,
            e,
            extra={"target": target},
        )
        return ProbeOutcome.failed(f"Probe failed: {type(e).__name__}: {e}")


async def check_archive_health(
    targets: Sequence[str],
    timeout: float | None = None,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HealthReport:
    """Check the health of multiple history archives in parallel.

    Args:
        targets: Archive URLs to check. Order is preserved in the report and
            duplicates are checked once per occurrence.
        timeout: Seconds allowed for each probe step (default: 10).
        user_agent: Client identifier sent with every request.
        transport: Optional transport override (used by tests).

    Returns:
        ``HealthReport`` with the healthy and unhealthy archives. An empty
        ``targets`` yields the empty report without any network I/O.

    Raises:
        ClientConfigurationError: If the shared client cannot be built. No
            archive is probed in that case.
    """
    targets = list(targets)
    if not targets:
        logger.debug("No archive URLs to check, skipping health check")
        return HealthReport.empty()

    effective_timeout = _validate_timeout(DEFAULT_CHECK_TIMEOUT if timeout is None else timeout)
    client = build_client(effective_timeout, user_agent, transport)

    async with client:
        outcomes = await asyncio.gather(
            *(_probe_isolated(client, target, effective_timeout) for target in targets)
        )

    report = HealthReport.from_outcomes(zip(targets, outcomes, strict=True))
    logger.debug("Archive health check complete: %s", report.summary())
    return report


class ArchiveHealthChecker:
    """Health checker bound to configured archives and backoff settings.

    Bundles the inputs a control loop needs for the start/continue decision:
    the archive list, the probe timeout, the client identifier, and the
    backoff used to space out re-checks. The checker holds no state between
    calls; the attempt counter stays with the caller.

    Attributes:
        archive_urls: Archives checked by ``check()``.
        timeout: Seconds allowed for each probe step.
        user_agent: Client identifier sent with every request.
        backoff: Backoff parameters for ``retry_delay()``.
    """

    def __init__(
        self,
        archive_urls: Sequence[str] = (),
        timeout: float = DEFAULT_CHECK_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        backoff: BackoffConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.archive_urls: tuple[str, ...] = tuple(archive_urls)
        self.timeout = timeout
        self.user_agent = user_agent
        self.backoff = backoff or BackoffConfig()
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ArchiveHealthChecker:
        """Create an ArchiveHealthChecker from application Config."""
        return cls(
            archive_urls=config.archive_urls,
            timeout=config.check_timeout,
            user_agent=config.user_agent,
            backoff=config.backoff,
            transport=transport,
        )

    async def check(self) -> HealthReport:
        """Check every configured archive once."""
        return await check_archive_health(
            self.archive_urls,
            self.timeout,
            user_agent=self.user_agent,
            transport=self._transport,
        )

    def retry_delay(self, attempt: int) -> float:
        """Seconds to wait before the check following ``attempt``."""
        return self.backoff.delay_for(attempt)
