"""Logging configuration for the billing desk."""

import logging

import structlog

from billing import config


def configure_logging(level: str | None = None) -> None:
    """Route structlog through a console renderer filtered at ``level``."""
    log_level = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    # Suppress noisy library loggers
    logging.getLogger("openpyxl").setLevel(logging.WARNING)


def get_logger(name: str):
    return structlog.get_logger(name)
