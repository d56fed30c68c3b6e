"""
Unit tests for monkeyrouter logging helpers.
"""

import json
from pathlib import Path

import structlog

from monkeyrouter.utils.logging import LogContext, RoutingLogger, get_logger, setup_logging


def _read_events(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_log_file_receives_events(self, tmp_path: Path) -> None:
        """Test events are written to the configured file."""
        path = tmp_path / "monkeyrouter.log"
        setup_logging(level="INFO", json_format=True, log_file=str(path))

        get_logger("tests").info("Catalog ready", models=4)

        events = _read_events(path)
        assert events[-1]["event"] == "Catalog ready"
        assert events[-1]["models"] == 4
        assert events[-1]["level"] == "info"

    def test_level_filters_events(self, tmp_path: Path) -> None:
        """Test events below the level are dropped."""
        path = tmp_path / "monkeyrouter.log"
        setup_logging(level="WARNING", json_format=True, log_file=str(path))

        logger = get_logger("tests")
        logger.info("hidden")
        logger.warning("shown")

        assert [e["event"] for e in _read_events(path)] == ["shown"]


class TestLogContext:
    """Tests for context binding."""

    def test_binds_and_unbinds(self) -> None:
        """Test values are visible only inside the block."""
        with LogContext(request_id="abc123"):
            assert structlog.contextvars.get_contextvars()["request_id"] == "abc123"
        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_context_reaches_events(self, tmp_path: Path) -> None:
        """Test bound values appear on routing events."""
        path = tmp_path / "monkeyrouter.log"
        setup_logging(level="INFO", json_format=True, log_file=str(path))

        with LogContext(request_id="abc123"):
            RoutingLogger().log_decision("high", "large-70b", 1024, 0.5)

        event = _read_events(path)[-1]
        assert event["event"] == "Query routed"
        assert event["request_id"] == "abc123"
        assert event["tier"] == "high"
        assert event["component"] == "router"
