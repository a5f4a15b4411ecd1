"""Logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


DEFAULT_LOG_FORMAT = "%(message)s"
DEFAULT_DATE_FORMAT = "[%Y-%m-%d %H:%M:%S]"


def configure_logging(level: int = logging.INFO, console: Console | None = None) -> logging.Logger:
    """Configure process-wide timestamped console logging."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        log_time_format=DEFAULT_DATE_FORMAT,
    )
    handler.setFormatter(logging.Formatter(fmt=DEFAULT_LOG_FORMAT))
    handler.setLevel(level)
    root_logger.addHandler(handler)

    logger = logging.getLogger("dns_optimizer")
    logger.setLevel(level)
    return logger
