"""Shared logging utilities for structured logging across the application.

This module provides a centralized logging configuration using structlog for
structured, JSON-formatted logs. The log level is read from LOG_LEVEL.
"""

import logging
import os
import sys

import structlog

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Safe to call repeatedly; only the first call has an effect unless the
    level is passed explicitly.

    Args:
        level: Log level name (e.g. "DEBUG"). Defaults to LOG_LEVEL or INFO.
    """
    global _configured

    if _configured and level is None:
        return

    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    _configured = True


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a configured structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module).

    Returns:
        Configured structlog logger instance ready for use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("video_processed", video_id="dQw4w9WgXcQ", chunks=12)
        >>> logger.exception("vector_search_failed", video_id="dQw4w9WgXcQ")
    """
    configure_logging()
    return structlog.get_logger(name)
