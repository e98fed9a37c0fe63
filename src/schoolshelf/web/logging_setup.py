"""structlog configuration for the API process."""

from __future__ import annotations

import logging

import structlog

from schoolshelf.config.app_config import PRODUCTION


def configure_logging(environment: str, level: int = logging.INFO) -> None:
    """Console output in development, one JSON object per line in production."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if environment == PRODUCTION:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
