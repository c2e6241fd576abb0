"""
Unit tests for logging setup.
"""

import logging

import pytest
from loguru import logger

from ferry_core.logging import STDLIB_LOGGERS, InterceptHandler, setup_logging


class TestSetupLogging:
    """Tests for loguru configuration."""

    def test_stdlib_logging_is_intercepted(self, captured):
        setup_logging("DEBUG")
        handler_id = logger.add(captured.append, level="DEBUG", format="{message}")
        try:
            logging.getLogger("python_multipart").warning("multipart boundary missing")
        finally:
            logger.remove(handler_id)

        assert any("multipart boundary missing" in str(message) for message in captured)

    def test_server_loggers_use_intercept_handler(self):
        setup_logging()

        handlers = logging.getLogger("uvicorn.error").handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], InterceptHandler)

    def test_forwarded_loggers_do_not_propagate(self):
        setup_logging()

        for name in STDLIB_LOGGERS:
            assert logging.getLogger(name).propagate is False


# --- Fixtures ---


@pytest.fixture
def captured():
    return []
