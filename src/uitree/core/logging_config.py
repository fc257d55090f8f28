"""
Structured Logging Configuration
Session logging for uitree with structlog over the stdlib ``uitree`` logger.
"""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "uitree"


def _make_handler(json_logs: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(jsonlogger.JsonFormatter("%(name)s %(levelname)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
    return handler


def configure_logging(level: str = "INFO", json_logs: bool = False) -> logging.Logger:
    """
    Configure structured logging for uitree sessions.

    Only the ``uitree`` logger tree is touched; an embedding application
    keeps its own root configuration. Calling again replaces the handler
    instead of stacking another one.

    Args:
        level: Log level name (unknown names fall back to INFO)
        json_logs: Emit one JSON object per event

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(_make_handler(json_logs))
    package_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return package_logger


def get_logger(name: str) -> structlog.BoundLogger:
    """Structured logger for a uitree module (pass ``__name__``)."""
    return structlog.get_logger(name)


class LogContext:
    """Bind session fields (root url, session hash) to every event in scope."""

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
