"""Result model for archive health checks.

``ProbeOutcome`` is the verdict for a single archive; ``HealthReport`` is the
classified aggregate for a whole archive set at one point in time.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProbeOutcome:
    """Verdict of probing a single archive.

    Either healthy (no payload) or unhealthy with a human-readable reason.
    The reason is shown to operators verbatim, so it is plain text rather
    than an error code.

    Attributes:
        healthy: Whether the archive is considered reachable.
        reason: Diagnostic text when unhealthy, otherwise None.
    """

    healthy: bool
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.healthy and self.reason is not None:
            raise ValueError("a healthy outcome carries no reason")
        if not self.healthy and not self.reason:
            raise ValueError("an unhealthy outcome requires a reason")

    @classmethod
    def ok(cls) -> ProbeOutcome:
        """Build a healthy outcome."""
        return cls(healthy=True)

    @classmethod
    def failed(cls, reason: str) -> ProbeOutcome:
        """Build an unhealthy outcome with the given reason."""
        return cls(healthy=False, reason=reason)


@dataclass(frozen=True)
class HealthReport:
    """Aggregate health of a set of archives at one point in time.

    Every input archive appears in exactly one of ``healthy`` or
    ``unhealthy``, once per occurrence in the input and in input order.

    Attributes:
        healthy: Archives that passed the check.
        unhealthy: ``(archive, reason)`` pairs for archives that failed.
    """

    healthy: tuple[str, ...] = field(default_factory=tuple)
    unhealthy: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> HealthReport:
        """Report for an empty archive set; both predicates are false."""
        return cls()

    @classmethod
    def from_outcomes(
        cls, outcomes: Iterable[tuple[str, ProbeOutcome]]
    ) -> HealthReport:
        """Partition ``(archive, outcome)`` pairs, preserving their order."""
        healthy: list[str] = []
        unhealthy: list[tuple[str, str]] = []
        for target, outcome in outcomes:
            if outcome.healthy:
                healthy.append(target)
            else:
                unhealthy.append((target, outcome.reason or "Unknown error"))
        return cls(healthy=tuple(healthy), unhealthy=tuple(unhealthy))

    @property
    def all_healthy(self) -> bool:
        """True when at least one archive was checked and none failed."""
        return not self.unhealthy and bool(self.healthy)

    @property
    def any_healthy(self) -> bool:
        """True when at least one archive is healthy."""
        return bool(self.healthy)

    def summary(self) -> str:
        """One-line status suitable for logs and telemetry."""
        if not self.healthy and not self.unhealthy:
            return "No archives configured"
        if self.all_healthy:
            return f"All {len(self.healthy)} archive(s) healthy"
        if self.any_healthy:
            return f"{len(self.healthy)} healthy, {len(self.unhealthy)} unhealthy archive(s)"
        return f"All {len(self.unhealthy)} archive(s) unhealthy"

    def error_details(self) -> str:
        """Newline-joined ``"  - archive: reason"`` lines, empty if none failed."""
        return "\n".join(f"  - {target}: {reason}" for target, reason in self.unhealthy)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "healthy": list(self.healthy),
            "unhealthy": [
                {"target": target, "reason": reason} for target, reason in self.unhealthy
            ],
            "all_healthy": self.all_healthy,
            "any_healthy": self.any_healthy,
            "summary": self.summary(),
        }
