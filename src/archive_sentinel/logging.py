"""Structured logging configuration for Archive Sentinel.

Probe and aggregator records carry their context (the archive URL, the
caller's retry attempt, the HTTP status) as ``extra`` attributes. Both
formatters render those attributes, so a failing archive can be grepped out
of text logs or filtered on in JSON logs.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import Any

# Record attributes rendered as context by the formatters, in display order.
CONTEXT_FIELDS: tuple[str, ...] = ("target", "attempt", "status")

_WILDCARD_TAG = "*"


def _component(record: logging.LogRecord) -> str:
    # "archive_sentinel.probe" -> "probe"
    return record.name.rsplit(".", 1)[-1]


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=UTC)


class DiagnosticFilter(logging.Filter):
    """Gate tagged DEBUG records behind an allow-list of diagnostic tags.

    A DEBUG record with a ``diagnostic_tag`` attribute is emitted only if
    its tag is enabled. Every other record passes. The probe tags its
    per-step chatter ``probe``; ``"*"`` enables every tag.

    Attributes:
        enabled_tags: Tags whose DEBUG records are emitted.
    """

    def __init__(self, enabled_tags: frozenset[str] | None = None) -> None:
        super().__init__()
        self.enabled_tags: frozenset[str] = enabled_tags or frozenset()

    @property
    def allow_all(self) -> bool:
        return _WILDCARD_TAG in self.enabled_tags

    def filter(self, record: logging.LogRecord) -> bool:
        tag = getattr(record, "diagnostic_tag", None)
        if record.levelno != logging.DEBUG or tag is None:
            return True
        return self.allow_all or tag in self.enabled_tags

    @classmethod
    def from_config_string(cls, tags_csv: str) -> DiagnosticFilter:
        """Build a filter from ``ARCHIVE_SENTINEL_DIAGNOSTIC_TAGS``, e.g. ``"probe"``."""
        return cls(frozenset(tag.strip() for tag in tags_csv.split(",") if tag.strip()))


class StructuredFormatter(logging.Formatter):
    """Human-readable single-line formatter.

    ``2024-05-01 12:00:00.123 [WARNING ] [probe       ] [target=... attempt=2] message``
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = _timestamp(record).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        line = f"{stamp} [{record.levelname:8}] [{_component(record):12}]"

        context = _context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"

        line += f" {record.getMessage()}"
        if record.exc_info:
            line += f" {self.formatException(record.exc_info)}"
        return line


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with context fields as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "component": _component(record),
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextAdapter(logging.LoggerAdapter[logging.Logger]):
    """Adapter that stamps fixed context onto every record it logs.

    Call-site ``extra`` values win over the bound context.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


class SentinelLogger(logging.Logger):
    """Logger that can bind context, e.g. ``logger.with_context(target=url)``."""

    def with_context(self, **context: Any) -> ContextAdapter:
        return ContextAdapter(self, context)


logging.setLoggerClass(SentinelLogger)


def get_logger(name: str) -> SentinelLogger:
    """Return the ``SentinelLogger`` for ``name`` (typically ``__name__``)."""
    return logging.getLogger(name)  # type: ignore[return-value]


def _build_handler(level: int, json_format: bool, diagnostic_tags: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else StructuredFormatter())
    handler.addFilter(DiagnosticFilter.from_config_string(diagnostic_tags))
    return handler


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    replace_handlers: bool = True,
    diagnostic_tags: str = "",
) -> None:
    """Configure logging for the command-line entry point.

    Library code never calls this; embedding applications keep their own
    logging setup.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        json_format: Emit JSON lines instead of text.
        replace_handlers: Remove existing root handlers first. Set to False
            to keep handlers installed by the embedding application.
        diagnostic_tags: Comma-separated diagnostic tags to enable for
            tagged DEBUG records. ``"*"`` enables all of them.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    if replace_handlers:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
    root.setLevel(numeric_level)
    root.addHandler(_build_handler(numeric_level, json_format, diagnostic_tags))

    logging.getLogger("archive_sentinel").setLevel(numeric_level)

    # httpx logs every request at INFO; keep it quiet unless we are debugging.
    if numeric_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
