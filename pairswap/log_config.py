"""structlog setup for the service entry point.

Library modules only call structlog.get_logger(); nothing is configured
on import, so embedding applications keep control of log output.
"""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        level: Standard level name (DEBUG, INFO, WARNING, ERROR)
        json: Render one JSON object per line instead of console output
    """
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
