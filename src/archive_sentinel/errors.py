"""Exceptions raised across Archive Sentinel call boundaries.

Per-archive failures are never raised; they are recorded as data in a
``HealthReport``. Only problems that make a check impossible to start
surface as exceptions.
"""

from __future__ import annotations


class ArchiveSentinelError(Exception):
    """Base class for all Archive Sentinel errors."""

    pass


class ClientConfigurationError(ArchiveSentinelError, ValueError):
    """Raised when the shared HTTP client cannot be built.

    This signals a configuration problem (for example a zero, negative or
    non-finite timeout) rather than a network condition, and is raised
    before any archive is probed.

    Example:
        >>> raise ClientConfigurationError("timeout must be a positive number, got -1")
    """

    pass
