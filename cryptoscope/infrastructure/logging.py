"""
Structured logging configuration using structlog.

Everything is written to stderr so that recommendation tables and JSON
printed on stdout can be piped. Log lines emitted during a recommendation
cycle carry that cycle's ``cycle_id``.
"""

import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

# Per-request INFO lines from the HTTP stack drown out source failover logs
HTTP_LOGGERS = ("httpx", "httpcore")


def setup_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure structured logging for the CLI.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Emit one JSON object per line instead of console output
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_format:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def new_cycle_id() -> str:
    return uuid.uuid4().hex[:8]


@contextmanager
def cycle_logging(cycle_id: str) -> Iterator[str]:
    """Bind ``cycle_id`` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(cycle_id=cycle_id):
        yield cycle_id


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog BoundLogger.
    """
    return structlog.get_logger(name)
