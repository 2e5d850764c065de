"""structlog setup."""

import logging

import structlog

from petdash.config.settings import settings


def configure_logging(level: str | None = None) -> None:
    """Filter structlog output at the configured level."""
    level_name = level or settings.log_level
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
    )
