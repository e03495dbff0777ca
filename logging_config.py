"""Structured logging configuration for the SignalFx function wrapper"""
import logging
import sys
from typing import Any, Dict, Optional
import structlog
from structlog.stdlib import LoggerFactory
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, StackInfoRenderer
from config import Config


def setup_structured_logging(config: Optional[Config] = None) -> None:
    """Setup structured logging with JSON format for production and console for development

    Azure Functions collects stdout, so no file handler is installed.
    """
    config = config or Config()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.is_development:
        processors.append(ConsoleRenderer())
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[console_handler]
    )
    # basicConfig is a no-op when the host already installed root handlers
    logging.getLogger().setLevel(level)

    # Transport noise
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def bind_invocation(logger: structlog.stdlib.BoundLogger, function_name: Optional[str],
                    invocation_id: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Add invocation identifiers to logger context"""
    return logger.bind(function_name=function_name, invocation_id=invocation_id)


def log_send_error(logger: structlog.stdlib.BoundLogger, error: Exception) -> None:
    """Log a failed metric send; sends are best effort and never raise"""
    logger.warning(
        "Metric sending error",
        error=str(error),
        error_type=type(error).__name__,
        event_type="metric_send_error"
    )


def log_error(logger: structlog.stdlib.BoundLogger, error: Exception, context: Dict[str, Any] = None) -> None:
    """Log error with structured context"""
    logger.error(
        "Error occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context or {},
        event_type="error",
        exc_info=True
    )
