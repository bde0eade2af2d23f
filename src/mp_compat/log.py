"""structlog configuration for mp-compat.

Library code only calls ``structlog.get_logger(__name__)``. Applications
embedding the checker call ``configure_logging`` once at startup to get the
same processor chain the checker is developed with.
"""

import logging
from typing import Any

import structlog
from structlog.types import Processor

from mp_compat.config import MpCompatConfig

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def make_level_filter(min_level: int) -> Processor:
    """Build a processor dropping events below ``min_level``."""

    def filter_by_level_processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        """Filter log events by level."""
        level_name = event_dict.get("level", "info").upper()
        if _LEVELS.get(level_name, logging.INFO) < min_level:
            raise structlog.DropEvent
        return event_dict

    return filter_by_level_processor


def configure_logging(config: MpCompatConfig | None = None) -> None:
    """Configure structlog from settings.

    Args:
        config: Settings to read ``log_level`` and ``log_format`` from
            (defaults to a fresh ``MpCompatConfig``)
    """
    config = config or MpCompatConfig()
    min_level = _LEVELS.get(config.log_level.upper(), logging.INFO)

    # ConsoleRenderer for humans by default, JSONRenderer for machine consumption
    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            make_level_filter(min_level),
            renderer,
        ],
        logger_factory=structlog.PrintLoggerFactory(),
    )
