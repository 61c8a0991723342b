"""Tests for logging configuration."""

import logging
import sys

import pytest
import structlog
from structlog.stdlib import BoundLogger
from structlog.testing import capture_logs
from structlog.types import BindableLogger

from georesolver.core.logging import (
    configure_logging,
    get_logger,
    redact_address,
    resolve_level,
)


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the test configuration back after each test."""
    yield
    configure_logging(testing=True)


def _processor_names() -> list[str]:
    return [p.__class__.__name__ for p in structlog.get_config()["processors"]]


def test_configure_logging_uses_json_renderer() -> None:
    configure_logging()

    assert "JSONRenderer" in _processor_names(), "JSONRenderer not configured"


def test_configure_logging_testing_mode() -> None:
    configure_logging(testing=True)

    names = _processor_names()
    assert "KeyValueRenderer" in names
    assert "JSONRenderer" not in names


def test_configure_logging_level() -> None:
    configure_logging(level="warning")

    package_logger = logging.getLogger("georesolver")
    assert package_logger.level == logging.WARNING
    assert package_logger.propagate is False
    assert len(package_logger.handlers) == 1


def test_unknown_level_falls_back_to_info() -> None:
    configure_logging(level="chatty")

    assert logging.getLogger("georesolver").level == logging.INFO


@pytest.mark.parametrize(
    "name,expected",
    [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("Critical", logging.CRITICAL),
        ("chatty", logging.INFO),
    ],
)
def test_resolve_level(name, expected) -> None:
    assert resolve_level(name) == expected


def test_repeated_configuration_keeps_one_stderr_handler() -> None:
    configure_logging()
    configure_logging(level="debug")

    [handler] = logging.getLogger("georesolver").handlers
    assert handler.stream is sys.stderr
    assert logging.getLogger().handlers == [handler]


def test_get_logger() -> None:
    """Test get_logger returns a configured logger."""
    logger = get_logger(__name__)
    assert isinstance(logger, BoundLogger | BindableLogger)

    logger.info("test_message", test_key="test_value")


def test_get_logger_binds_initial_values() -> None:
    logger = get_logger("georesolver.test", module="test_module")

    with capture_logs() as entries:
        logger.info("hello")

    assert entries == [{"module": "test_module", "event": "hello", "log_level": "info"}]


class TestRedactAddress:
    def test_short_address_unchanged(self):
        assert redact_address("Paris, France") == "Paris, France"

    def test_long_address_truncated(self):
        address = "x" * 80

        assert redact_address(address) == "x" * 50 + "..."

    def test_custom_length(self):
        assert redact_address("abcdefgh", keep=3) == "abc..."
