"""Capped exponential backoff for re-checking unhealthy archives.

The caller owns the retry loop and the attempt counter; this module only
turns an attempt number into a wait duration in seconds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_BACKOFF_BASE_SECONDS = 15.0
DEFAULT_BACKOFF_MAX_SECONDS = 300.0

# The exponent stops growing here regardless of max_delay, so the product
# stays bounded for arbitrarily large attempt counts.
MAX_BACKOFF_EXPONENT = 5


def calculate_backoff(
    attempt: int,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> float:
    """Calculate the delay before the next archive health check.

    ``delay = min(base_delay * 2 ** min(attempt, 5), max_delay)``

    With the defaults: 15, 30, 60, 120, 240, then 300 seconds from attempt 5
    onwards.

    Args:
        attempt: Retry attempt number (0-indexed).
        base_delay: Base delay in seconds (default: 15).
        max_delay: Maximum delay cap in seconds (default: 300).

    Returns:
        Delay in seconds before the next check.

    Raises:
        ValueError: If ``attempt`` or either delay is negative, ``base_delay``
            is not finite, or ``max_delay`` is NaN.
    """
    base = DEFAULT_BACKOFF_BASE_SECONDS if base_delay is None else base_delay
    cap = DEFAULT_BACKOFF_MAX_SECONDS if max_delay is None else max_delay

    if attempt < 0:
        raise ValueError(f"attempt must be non-negative, got {attempt}")
    if not math.isfinite(base) or base < 0:
        raise ValueError(f"base_delay must be a finite non-negative number, got {base}")
    if math.isnan(cap) or cap < 0:
        raise ValueError(f"max_delay must be a non-negative number, got {cap}")

    exponent = min(attempt, MAX_BACKOFF_EXPONENT)
    return float(min(base * (2**exponent), cap))


@dataclass(frozen=True)
class BackoffConfig:
    """Backoff parameters for scheduling archive re-checks.

    Attributes:
        base_delay: Delay in seconds for attempt 0.
        max_delay: Upper bound on any delay, in seconds.
    """

    base_delay: float = DEFAULT_BACKOFF_BASE_SECONDS
    max_delay: float = DEFAULT_BACKOFF_MAX_SECONDS

    def delay_for(self, attempt: int) -> float:
        """Return the delay in seconds for the given attempt."""
        return calculate_backoff(attempt, self.base_delay, self.max_delay)
