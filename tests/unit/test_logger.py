"""Unit tests for logging configuration."""

import json
import logging
from datetime import datetime, timezone

from pyrislive.monitoring.logger import (
    LOG_FIELD_MAP,
    add_log_level,
    configure_logging,
    get_logger,
    rename_fields,
    render_ris_values,
)


def _last_event(caplog) -> dict:
    return json.loads(caplog.records[-1].getMessage())  # type: ignore[no-any-return]


class TestProcessors:
    """Test the individual structlog processors."""

    def test_add_log_level(self) -> None:
        """Test different log levels are upper-cased."""
        for level in ["debug", "info", "warning", "error", "critical"]:
            result = add_log_level(None, level, {"event": "test"})
            assert result["level"] == level.upper()

    def test_datetimes_rendered_as_rfc3339(self) -> None:
        """Test event times become ISO text."""
        event_dict = {
            "event": "ris_update",
            "time": datetime(2019, 7, 11, 5, 17, 13, 680000, tzinfo=timezone.utc),
        }

        result = render_ris_values(None, "info", event_dict)

        assert result["time"] == "2019-07-11T05:17:13.680000+00:00"

    def test_communities_rendered_as_pairs(self) -> None:
        """Test community tuples become asn:value strings."""
        event_dict = {
            "event": "ris_route",
            "communities": [(28917, 4000), (28917, 4003)],
        }

        result = render_ris_values(None, "info", event_dict)

        assert result["communities"] == ["28917:4000", "28917:4003"]

    def test_empty_communities_untouched(self) -> None:
        """Test absent or empty communities are left alone."""
        event_dict: dict = {"communities": []}
        assert render_ris_values(None, "info", event_dict) == {"communities": []}
        assert render_ris_values(None, "info", {"event": "x"}) == {"event": "x"}

    def test_rename_fields(self) -> None:
        """Test keys are renamed using the field map."""
        processor = rename_fields({"event": "message", "level": "severity"})
        event_dict = {"event": "ris_open", "level": "INFO", "host": "rrc00"}

        result = processor(None, "info", event_dict)

        assert result == {"message": "ris_open", "severity": "INFO", "host": "rrc00"}


class TestLoggerConfiguration:
    """Test logger configuration."""

    def test_configure_logging_returns_logger(self) -> None:
        """Test that configure_logging returns a logger."""
        logger = configure_logging()

        assert hasattr(logger, "info")
        assert hasattr(logger, "error")

    def test_logging_produces_json(self, caplog) -> None:
        """Test that log records are JSON objects with mapped keys."""
        logger = get_logger("test_json")

        with caplog.at_level(logging.INFO):
            logger.info("test_message", key="value", number=123)

        event = _last_event(caplog)
        assert event[LOG_FIELD_MAP["event"]] == "test_message"
        assert event[LOG_FIELD_MAP["level"]] == "INFO"
        assert event["key"] == "value"
        assert event["number"] == 123
        assert event["timestamp"].endswith("Z")
        assert "event" not in event

    def test_debug_logging_when_enabled(self, caplog) -> None:
        """Test DEBUG level logging is captured when enabled."""
        logger = get_logger("test_debug")

        with caplog.at_level(logging.DEBUG):
            logger.debug("debug_message", detail="test_detail")

        assert len(caplog.records) > 0


class TestStructuredLogging:
    """Test RIS Live structured log events."""

    def test_ris_route_log(self, caplog) -> None:
        """Test a route event renders its time and communities."""
        logger = get_logger("test")

        with caplog.at_level(logging.INFO):
            logger.info(
                "ris_route",
                host="rrc13",
                time=datetime(2019, 7, 11, 5, 17, 13, 680000, tzinfo=timezone.utc),
                prefix="177.23.116.0/24",
                communities=[(28917, 4000)],
            )

        event = _last_event(caplog)
        assert event["message"] == "ris_route"
        assert event["time"] == "2019-07-11T05:17:13.680000+00:00"
        assert event["communities"] == ["28917:4000"]

    def test_logger_binds_context(self, caplog) -> None:
        """Test binding context to logger."""
        bound_logger = get_logger("test").bind(host="rrc00", worker=1)

        with caplog.at_level(logging.INFO):
            bound_logger.info("test_event", action="test_action")

        event = _last_event(caplog)
        assert event["host"] == "rrc00"
        assert event["worker"] == 1
