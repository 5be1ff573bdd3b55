"""Command-line interface argument parsing for Archive Sentinel.

This module provides the CLI argument parser that handles:
- Archive URLs to check (falling back to configuration)
- Probe timeout override
- Retry attempt number for the suggested backoff delay
- JSON output
- Log level override
- Environment file specification
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer") from e
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"{parsed} is negative")
    return parsed


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Optional list of arguments to parse. If None, uses sys.argv.

    Returns:
        Parsed arguments namespace with the following attributes:
        - urls: Archive URLs given on the command line (may be empty)
        - timeout: Per-step probe timeout in seconds, or None
        - attempt: Retry attempt number, or None
        - json: Whether to print the report as JSON
        - log_level: Logging level, or None
        - env_file: Path to .env file, or None
    """
    parser = argparse.ArgumentParser(
        prog="archive-sentinel",
        description="Archive Sentinel - history archive health check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Exit status is 0 when every archive is healthy and 1 otherwise.\n"
            "Without URLs, ARCHIVE_SENTINEL_ARCHIVE_URLS is used."
        ),
    )

    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="History archive URLs to check",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed for each probe step (overrides ARCHIVE_SENTINEL_CHECK_TIMEOUT)",
    )

    parser.add_argument(
        "--attempt",
        type=_non_negative_int,
        default=None,
        help="Retry attempt number; when archives are unhealthy, print the delay before the next check",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (overrides ARCHIVE_SENTINEL_LOG_LEVEL)",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: ./.env)",
    )

    return parser.parse_args(args)


__all__ = ["parse_args"]
