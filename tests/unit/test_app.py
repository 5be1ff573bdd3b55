"""Tests for the application runner."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import pytest

from archive_sentinel.app import (
    EXIT_HEALTHY,
    EXIT_UNHEALTHY,
    EXIT_USAGE,
    build_checker,
    main,
    run_check,
)
from archive_sentinel.backoff import BackoffConfig
from archive_sentinel.cli import parse_args
from archive_sentinel.config import Config
from archive_sentinel.health import ArchiveHealthChecker
from archive_sentinel.probe import METADATA_PATH


class TestBuildChecker:
    """Tests for build_checker."""

    def test_uses_config(self) -> None:
        config = Config(archive_urls=("http://a.test",), check_timeout=4.0)
        checker = build_checker(parse_args([]), config)

        assert checker.archive_urls == ("http://a.test",)
        assert checker.timeout == 4.0

    def test_command_line_overrides(self) -> None:
        config = Config(archive_urls=("http://a.test",), check_timeout=4.0)
        checker = build_checker(parse_args(["http://b.test", "--timeout", "1.5"]), config)

        assert checker.archive_urls == ("http://b.test",)
        assert checker.timeout == 1.5


class TestRunCheck:
    """Tests for run_check."""

    def test_all_healthy(
        self, archive_transport: Callable[..., Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        transport = archive_transport({f"a.test{METADATA_PATH}": 200})
        checker = ArchiveHealthChecker(["http://a.test"], transport=transport)

        assert run_check(checker, attempt=2) == EXIT_HEALTHY

        out = capsys.readouterr().out
        assert "All 1 archive(s) healthy" in out
        assert "Next check" not in out

    def test_unhealthy_with_attempt(
        self, archive_transport: Callable[..., Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        transport = archive_transport({"a.test/": 200}, default_status=502)
        checker = ArchiveHealthChecker(
            ["http://a.test", "http://b.test"],
            backoff=BackoffConfig(base_delay=15.0, max_delay=300.0),
            transport=transport,
        )

        assert run_check(checker, attempt=2) == EXIT_UNHEALTHY

        out = capsys.readouterr().out
        assert "1 healthy, 1 unhealthy archive(s)" in out
        assert "  - http://b.test: Archive returned HTTP 502 Bad Gateway" in out
        assert "Next check in 60s (attempt 2)" in out

    def test_unhealthy_without_attempt(
        self, archive_transport: Callable[..., Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        transport = archive_transport({})
        checker = ArchiveHealthChecker(["http://a.test"], transport=transport)

        assert run_check(checker) == EXIT_UNHEALTHY
        assert "Next check" not in capsys.readouterr().out

    def test_json_output(
        self, archive_transport: Callable[..., Any], capsys: pytest.CaptureFixture[str]
    ) -> None:
        transport = archive_transport({})
        checker = ArchiveHealthChecker(["http://a.test"], transport=transport)

        assert run_check(checker, attempt=7, json_output=True) == EXIT_UNHEALTHY

        payload = json.loads(capsys.readouterr().out)
        assert payload["healthy"] == []
        assert payload["unhealthy"] == [
            {"target": "http://a.test", "reason": "Archive returned HTTP 404 Not Found"}
        ]
        assert payload["summary"] == "All 1 archive(s) unhealthy"
        assert payload["retry_delay_seconds"] == 300.0

    def test_no_archives(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run_check(ArchiveHealthChecker()) == EXIT_UNHEALTHY
        assert "No archives configured" in capsys.readouterr().out

    def test_invalid_timeout(
        self,
        archive_transport: Callable[..., Any],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        transport = archive_transport({}, default_status=200)
        checker = ArchiveHealthChecker(["http://a.test"], timeout=0, transport=transport)

        with caplog.at_level(logging.ERROR):
            assert run_check(checker) == EXIT_USAGE

        assert "Cannot run archive health check" in caplog.text
        assert transport.requests == []


class TestMain:
    """Tests for main."""

    def test_no_archives_configured(
        self,
        clean_env: None,
        restore_root_logger: logging.Logger,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main([]) == EXIT_UNHEALTHY
        assert "No archives configured" in capsys.readouterr().out

    def test_invalid_timeout_exit_code(
        self, clean_env: None, restore_root_logger: logging.Logger
    ) -> None:
        assert main(["http://a.test", "--timeout", "-1"]) == EXIT_USAGE
