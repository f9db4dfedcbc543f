"""Structured logging configuration using structlog.

Provides JSON logging for machines and console logging for people.
Library modules only obtain loggers; configuring output is left to the
application, or to the command line entry point.
"""

import logging
import sys
from typing import Any, List

import structlog

LEVEL_ENV = "CONFPROPS_LOG_LEVEL"
FORMAT_ENV = "CONFPROPS_LOG_FORMAT"


def setup_logging(level: str = "WARNING", format: str = "console") -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" or "console"
    """
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    level_num = logging.getLevelName(level.upper())
    if not isinstance(level_num, int):
        level_num = logging.WARNING

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )
