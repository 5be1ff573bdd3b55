"""Two-step reachability probe for a single history archive.

The probe first asks for the archive's well-known metadata document, the
canonical sign of a valid history archive. Many mirrors omit that file or
serve a stale 404 for it, so any failure there falls back to checking that
the archive root answers at all. Only the root step can produce an
unhealthy verdict.

Both steps use ``HEAD`` so no body is transferred, and each step is bounded
by the full timeout independently. The probe never retries; re-checking is
scheduled by the caller using ``archive_sentinel.backoff``.
"""

from __future__ import annotations

import asyncio

import httpx

from archive_sentinel.logging import get_logger
from archive_sentinel.models import ProbeOutcome

logger = get_logger(__name__)

METADATA_PATH = "/.well-known/stellar-history.json"
"""Archive metadata document, probed before falling back to the root."""

_DIAGNOSTIC_TAG = "probe"

# Failures that mean "could not get an HTTP answer". Anything else escaping
# a request is a bug and is left to the aggregator to contain.
_TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    httpx.RequestError,
    httpx.InvalidURL,
    TimeoutError,
)


def normalize_target(target: str) -> str:
    """Strip a single trailing ``/`` from an archive URL."""
    return target[:-1] if target.endswith("/") else target


def _describe_status(response: httpx.Response) -> str:
    return f"HTTP {response.status_code} {response.reason_phrase}".rstrip()


def _describe_error(error: BaseException, timeout: float) -> str:
    if isinstance(error, TimeoutError) and not str(error):
        return f"request timed out after {timeout:g}s"
    return str(error) or type(error).__name__


async def _head(client: httpx.AsyncClient, url: str, timeout: float) -> httpx.Response:
    # httpx applies the timeout per phase (connect, read, ...); wait_for bounds the whole request.
    return await asyncio.wait_for(client.head(url, timeout=timeout), timeout=timeout)


async def probe_archive(
    client: httpx.AsyncClient,
    target: str,
    timeout: float,
) -> ProbeOutcome:
    """Check whether a single history archive is reachable.

    Tries the following endpoints in order:
    1. ``HEAD {target}/.well-known/stellar-history.json``; a 2xx is healthy.
    2. ``HEAD {target}``; a 2xx is healthy, anything else is unhealthy.

    Args:
        client: Shared async client (connection pool, user agent).
        target: Archive base URL. One trailing ``/`` is ignored.
        timeout: Seconds allowed for each step.

    Returns:
        ``ProbeOutcome.ok()`` or ``ProbeOutcome.failed(reason)``. Transport
        errors are reported as outcomes, never raised.
    """
    base_url = normalize_target(target)
    metadata_url = f"{base_url}{METADATA_PATH}"
    target_logger = logger.with_context(target=target)
    debug_extra = {"diagnostic_tag": _DIAGNOSTIC_TAG}

    target_logger.debug("[ARCHIVE_PROBE] Checking metadata: %s", metadata_url, extra=debug_extra)

    try:
        response = await _head(client, metadata_url, timeout)
    except _TRANSPORT_ERRORS as e:
        target_logger.debug(
            "[ARCHIVE_PROBE] Metadata endpoint failed (%s), trying root: %s",
            _describe_error(e, timeout),
            target,
            extra=debug_extra,
        )
    else:
        if response.is_success:
            target_logger.debug(
                "[ARCHIVE_PROBE] Archive healthy (metadata endpoint): %s", target, extra=debug_extra
            )
            return ProbeOutcome.ok()
        target_logger.debug(
            "[ARCHIVE_PROBE] Metadata endpoint returned %s, trying root: %s",
            _describe_status(response),
            target,
            extra=debug_extra,
        )

    try:
        response = await _head(client, base_url, timeout)
    except _TRANSPORT_ERRORS as e:
        reason = f"Connection failed: {_describe_error(e, timeout)}"
    else:
        if response.is_success:
            target_logger.debug(
                "[ARCHIVE_PROBE] Archive healthy (root endpoint): %s", target, extra=debug_extra
            )
            return ProbeOutcome.ok()
        reason = f"Archive returned {_describe_status(response)}"

    target_logger.warning("[ARCHIVE_PROBE] %s: %s", target, reason)
    return ProbeOutcome.failed(reason)
