"""Core application runner for Archive Sentinel.

Runs a single archive health check and reports the result:
- Human-readable summary and per-archive errors, or a JSON document
- The suggested delay before the next check, when archives are unhealthy
  and the caller passed its retry attempt number
- An exit status usable by scripts and init containers

It never loops or sleeps; scheduling the next check belongs to the caller.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from archive_sentinel.cli import parse_args
from archive_sentinel.config import Config, load_config
from archive_sentinel.errors import ClientConfigurationError
from archive_sentinel.health import ArchiveHealthChecker
from archive_sentinel.logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_HEALTHY = 0
EXIT_UNHEALTHY = 1
EXIT_USAGE = 2


def build_checker(parsed: argparse.Namespace, config: Config) -> ArchiveHealthChecker:
    """Create the checker, letting command-line values override configuration.

    Args:
        parsed: Parsed command-line arguments.
        config: Loaded application configuration.

    Returns:
        ArchiveHealthChecker for this run.
    """
    checker = ArchiveHealthChecker.from_config(config)
    if parsed.urls:
        checker.archive_urls = tuple(parsed.urls)
    if parsed.timeout is not None:
        checker.timeout = parsed.timeout
    return checker


def run_check(
    checker: ArchiveHealthChecker,
    attempt: int | None = None,
    json_output: bool = False,
) -> int:
    """Run one health check and print the result to stdout.

    Args:
        checker: Configured ArchiveHealthChecker.
        attempt: Caller's retry attempt number. When given and the archives
            are not all healthy, the delay before the next check is printed.
        json_output: Print a JSON document instead of text.

    Returns:
        Exit code: 0 if every archive is healthy, 1 if not (including when no
        archives are configured), 2 if the check could not be started.
    """
    try:
        report = asyncio.run(checker.check())
    except ClientConfigurationError as e:
        logger.error("Cannot run archive health check: %s", e)
        return EXIT_USAGE

    retry_delay: float | None = None
    if attempt is not None and not report.all_healthy:
        retry_delay = checker.retry_delay(attempt)

    if json_output:
        payload = report.to_dict()
        payload["retry_delay_seconds"] = retry_delay
        print(json.dumps(payload, indent=2))
    else:
        print(report.summary())
        details = report.error_details()
        if details:
            print(details)
        if retry_delay is not None:
            print(f"Next check in {retry_delay:g}s (attempt {attempt})")

    if report.all_healthy:
        logger.info("Archive health check passed: %s", report.summary())
        return EXIT_HEALTHY

    logger.warning(
        "Archive health check failed: %s",
        report.summary(),
        extra={"attempt": attempt} if attempt is not None else None,
    )
    return EXIT_UNHEALTHY


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Optional list of command-line arguments.

    Returns:
        Exit code for the application.
    """
    parsed = parse_args(args)
    config = load_config(parsed.env_file)

    setup_logging(
        level=parsed.log_level or config.log_level,
        json_format=config.log_json,
        diagnostic_tags=config.diagnostic_tags,
    )

    checker = build_checker(parsed, config)
    return run_check(checker, attempt=parsed.attempt, json_output=parsed.json)


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


__all__ = [
    "build_checker",
    "main",
    "run",
    "run_check",
]
