"""Structured logging configuration for policyworth-core.

Modules log through ``structlog.get_logger()`` with snake_case event names
and key/value context. Call :func:`configure_logging` once at start-up to
choose the level and renderer; without it structlog's defaults apply.
"""

import logging

import structlog

from .config import EngineSettings


def configure_logging(level: str = "INFO", *, json: bool = False) -> None:
    """Configure structlog for the application.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json: Render JSON lines instead of the console format
    """
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings: EngineSettings) -> None:
    """Configure logging from engine settings; production logs JSON."""
    configure_logging(settings.log_level, json=settings.is_production)
