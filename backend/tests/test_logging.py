"""
Tests for logging setup
"""

import logging

import pytest

from coursework.core.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    yield
    setup_logging("INFO")


class TestSetupLogging:
    """setup_logging level override."""

    def test_get_logger_is_cached(self):
        assert get_logger() is get_logger()
        assert get_logger().name == "coursework"

    def test_level_override_rebuilds_handlers(self, restore_logging):
        logger = setup_logging("DEBUG")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert all(h.level == logging.DEBUG for h in logger.handlers)
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_http_client_quiet_above_debug(self, restore_logging):
        setup_logging("WARNING")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
        assert get_logger().level == logging.WARNING
