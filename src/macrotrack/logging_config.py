"""Logging configuration for the application."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Configure root logging with a Rich handler writing to stderr.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
            )
        ],
        force=True,
    )

    logger = logging.getLogger("macrotrack")
    logger.setLevel(log_level)
    return logger
