"""Tests for logging configuration"""
import logging
import os
from unittest.mock import patch
from structlog.testing import capture_logs

from config import Config
from logging_config import (
    setup_structured_logging,
    get_logger,
    bind_invocation,
    log_send_error,
    log_error
)
from metrics.models import SendError


class TestLoggingConfig:
    """Test logging configuration and structured logging"""

    def test_setup_structured_logging(self):
        """Test structured logging setup"""
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}):
            setup_structured_logging(Config())

        root = logging.getLogger()
        assert root.isEnabledFor(logging.DEBUG)
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_setup_defaults_without_config(self):
        # Should not raise
        setup_structured_logging()

    def test_get_logger(self):
        """Test getting structured logger"""
        logger = get_logger("test_logger")

        assert logger is not None
        assert hasattr(logger, 'info')
        assert hasattr(logger, 'error')
        assert hasattr(logger, 'debug')
        assert hasattr(logger, 'warning')

    def test_bind_invocation(self):
        with capture_logs() as logs:
            logger = bind_invocation(get_logger("test"), "Hello-SignalFx", "inv-9")
            logger.info("hello")

        assert logs[0]["function_name"] == "Hello-SignalFx"
        assert logs[0]["invocation_id"] == "inv-9"

    def test_log_send_error(self):
        with capture_logs() as logs:
            log_send_error(get_logger("test"), SendError("timed out"))

        assert logs == [{
            "event": "Metric sending error",
            "error": "timed out",
            "error_type": "SendError",
            "event_type": "metric_send_error",
            "log_level": "warning",
        }]

    def test_log_error(self):
        """Test structured error logging"""
        logger = get_logger("test")
        error = ValueError("Test error")

        with capture_logs() as logs:
            log_error(logger, error, {"component": "test"})
            log_error(logger, error)

        assert logs[0]["context"] == {"component": "test"}
        assert logs[1]["context"] == {}
        assert all(entry["log_level"] == "error" for entry in logs)
