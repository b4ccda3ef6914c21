"""
Structured logging setup.

Every service gets its logger from ``get_logger``; the processors are
configured once at application start-up.
"""

import logging
import sys

import structlog

from bankdash.core.config import settings


def configure_logging(level: str = None, json_output: bool = None) -> None:
    """
    Configure the stdlib root logger and structlog.

    Args:
        level: Log level name, defaults to ``settings.LOG_LEVEL``
        json_output: Render JSON lines instead of the console renderer
    """
    level = (level or settings.LOG_LEVEL).upper()
    if json_output is None:
        json_output = settings.LOG_JSON

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """Return a bound structlog logger for a module."""
    return structlog.get_logger(name)
