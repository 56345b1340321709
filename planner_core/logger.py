"""Logging configuration for the planner."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "planner_core"


def setup_logging(level: str | int = "INFO", console: Console | None = None) -> logging.Logger:
    """Configure the planner logger.

    Can be called multiple times to reconfigure the logger.

    Args:
        level: Logging level name or number
        console: Optional rich console (defaults to stderr, useful for testing)

    Returns:
        The configured planner logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(level if isinstance(level, int) else level.upper())

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Reset the logger to a clean state."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
