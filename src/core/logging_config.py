"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Modules obtain loggers through ``get_logger`` and emit named events.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL


def configure_logging(log_level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and level filtering.

    Args:
        log_level: Minimum level name, e.g. ``INFO``.
    """
    level = logging.getLevelName(log_level.upper())
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def _stderr_logger_factory(*_args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per call so redirected streams are honored.
    return structlog.PrintLogger(file=sys.stderr)


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger emitting JSON events.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)
