"""Archive Sentinel - concurrent health checks for history archives."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("archive-sentinel")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source without pip install)
    __version__ = "0.0.0.dev0"

# Re-export core public API
from archive_sentinel.backoff import BackoffConfig, calculate_backoff
from archive_sentinel.errors import ArchiveSentinelError, ClientConfigurationError
from archive_sentinel.health import ArchiveHealthChecker, check_archive_health
from archive_sentinel.models import HealthReport, ProbeOutcome
from archive_sentinel.probe import probe_archive

# NOTE: Update this list when adding new exports to this module.
__all__ = [
    "__version__",
    "ArchiveHealthChecker",
    "ArchiveSentinelError",
    "BackoffConfig",
    "ClientConfigurationError",
    "HealthReport",
    "ProbeOutcome",
    "calculate_backoff",
    "check_archive_health",
    "probe_archive",
]
