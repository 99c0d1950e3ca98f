"""Tests for structlog configuration."""

import json

import pytest
import structlog

from policyworth_core.config import EngineSettings
from policyworth_core.logging_config import configure_from_settings, configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_level_filters_events(self, capsys):
        """Events below the configured level are dropped."""
        configure_logging("WARNING")
        logger = structlog.get_logger()

        logger.info("quiet_event")
        logger.warning("loud_event", county="Sarasota")

        out = capsys.readouterr().out
        assert "quiet_event" not in out
        assert "loud_event" in out

    def test_json_renderer(self, capsys):
        """JSON output carries the event, level and context."""
        configure_logging("info", json=True)

        structlog.get_logger().info("report_completed", records=3)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "report_completed"
        assert payload["level"] == "info"
        assert payload["records"] == 3
        assert "timestamp" in payload

    def test_production_settings_log_json(self, capsys):
        """Production settings switch to JSON lines."""
        configure_from_settings(EngineSettings(env="production", log_level="INFO"))

        structlog.get_logger().info("settings_event")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        assert json.loads(line)["event"] == "settings_event"
