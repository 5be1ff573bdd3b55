"""Configuration loading from environment variables."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from archive_sentinel.backoff import (
    DEFAULT_BACKOFF_BASE_SECONDS,
    DEFAULT_BACKOFF_MAX_SECONDS,
    BackoffConfig,
)
from archive_sentinel.health import DEFAULT_CHECK_TIMEOUT, DEFAULT_USER_AGENT

# Valid log levels
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

ENV_PREFIX = "ARCHIVE_SENTINEL_"


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment.

    This dataclass is frozen (immutable) to prevent accidental modification
    after creation.
    """

    # Archives to check, in the order they are reported
    archive_urls: tuple[str, ...] = ()

    # Seconds allowed for each probe step
    check_timeout: float = DEFAULT_CHECK_TIMEOUT

    # Sent as User-Agent with every probe
    user_agent: str = DEFAULT_USER_AGENT

    # Spacing between re-checks while archives are unhealthy
    backoff: BackoffConfig = field(default_factory=BackoffConfig)

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    diagnostic_tags: str = ""


def _parse_positive_float(value: str, name: str, default: float) -> float:
    """Parse a string as a positive, finite float with validation.

    Args:
        value: The string value to parse.
        name: The name of the setting (for error messages).
        default: The default value to use if parsing fails.

    Returns:
        The parsed float, or the default if invalid.

    Logs a warning if the value is invalid.
    """
    try:
        parsed = float(value)
    except ValueError:
        logging.warning(
            "Invalid %s: '%s' is not a valid number, using default %s",
            name,
            value,
            default,
        )
        return default
    if not math.isfinite(parsed) or parsed <= 0:
        logging.warning(
            "Invalid %s: %s is not a positive number, using default %s",
            name,
            value,
            default,
        )
        return default
    return parsed


def _parse_non_negative_float(value: str, name: str, default: float) -> float:
    """Parse a string as a non-negative, finite float with validation.

    Args:
        value: The string value to parse.
        name: The name of the setting (for error messages).
        default: The default value to use if parsing fails.

    Returns:
        The parsed non-negative float, or the default if invalid.

    Logs a warning if the value is invalid.
    """
    try:
        parsed = float(value)
    except ValueError:
        logging.warning(
            "Invalid %s: '%s' is not a valid number, using default %s",
            name,
            value,
            default,
        )
        return default
    if not math.isfinite(parsed) or parsed < 0:
        logging.warning(
            "Invalid %s: %s is negative or not finite, using default %s",
            name,
            value,
            default,
        )
        return default
    return parsed


def _validate_log_level(value: str, default: str = "INFO") -> str:
    """Validate and normalize a log level string.

    Args:
        value: The log level string to validate.
        default: The default value to use if invalid.

    Returns:
        The validated log level (uppercase), or the default if invalid.

    Logs a warning if the value is invalid.
    """
    normalized = value.upper()
    if normalized not in VALID_LOG_LEVELS:
        logging.warning(
            "Invalid %sLOG_LEVEL: '%s' is not valid, using default '%s'. Valid values: %s",
            ENV_PREFIX,
            value,
            default,
            ", ".join(sorted(VALID_LOG_LEVELS)),
        )
        return default
    return normalized


def _parse_bool(value: str) -> bool:
    """Parse a string as a boolean.

    Returns True if value is "true", "1", or "yes" (case-insensitive), False otherwise.
    """
    return value.lower() in ("true", "1", "yes")


def parse_archive_urls(value: str) -> tuple[str, ...]:
    """Split a comma-separated archive list, dropping blank entries.

    The URLs themselves are not validated; a malformed one is reported as
    unhealthy when it is probed.
    """
    return tuple(url.strip() for url in value.split(",") if url.strip())


def _validate_user_agent(value: str, default: str = DEFAULT_USER_AGENT) -> str:
    """Return the stripped user agent, or the default if it is blank."""
    stripped = value.strip()
    if not stripped:
        logging.warning(
            "Invalid %sUSER_AGENT: empty value, using default '%s'",
            ENV_PREFIX,
            default,
        )
        return default
    return stripped


def load_config(env_file: Path | None = None) -> Config:
    """Load configuration from environment variables.

    Args:
        env_file: Optional path to .env file. If not provided,
                  looks for .env in current directory.

    Returns:
        Config object with loaded values.

    Invalid values are logged and replaced by their defaults; loading never
    fails on a bad value.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    archive_urls = parse_archive_urls(os.getenv(f"{ENV_PREFIX}ARCHIVE_URLS", ""))

    check_timeout = _parse_positive_float(
        os.getenv(f"{ENV_PREFIX}CHECK_TIMEOUT", str(DEFAULT_CHECK_TIMEOUT)),
        f"{ENV_PREFIX}CHECK_TIMEOUT",
        DEFAULT_CHECK_TIMEOUT,
    )

    user_agent = _validate_user_agent(os.getenv(f"{ENV_PREFIX}USER_AGENT", DEFAULT_USER_AGENT))

    backoff = BackoffConfig(
        base_delay=_parse_non_negative_float(
            os.getenv(f"{ENV_PREFIX}BACKOFF_BASE", str(DEFAULT_BACKOFF_BASE_SECONDS)),
            f"{ENV_PREFIX}BACKOFF_BASE",
            DEFAULT_BACKOFF_BASE_SECONDS,
        ),
        max_delay=_parse_non_negative_float(
            os.getenv(f"{ENV_PREFIX}BACKOFF_MAX", str(DEFAULT_BACKOFF_MAX_SECONDS)),
            f"{ENV_PREFIX}BACKOFF_MAX",
            DEFAULT_BACKOFF_MAX_SECONDS,
        ),
    )

    log_level = _validate_log_level(os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO"))
    log_json = _parse_bool(os.getenv(f"{ENV_PREFIX}LOG_JSON", ""))
    diagnostic_tags = os.getenv(f"{ENV_PREFIX}DIAGNOSTIC_TAGS", "")

    return Config(
        archive_urls=archive_urls,
        check_timeout=check_timeout,
        user_agent=user_agent,
        backoff=backoff,
        log_level=log_level,
        log_json=log_json,
        diagnostic_tags=diagnostic_tags,
    )
