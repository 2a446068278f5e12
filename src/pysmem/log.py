"""Logging setup for pysmem.

Log output goes to stderr so it never mixes with the table on stdout.
"""

import logging
import sys

import structlog

_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def level_for(verbosity: int) -> int:
    """Map the number of -v flags to a logging level."""
    return _LEVELS[min(max(verbosity, 0), len(_LEVELS) - 1)]


def configure(verbosity: int = 0) -> None:
    """Configure structlog for the given number of -v flags."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_for(verbosity)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
