"""Logging setup shared by all tools."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
DATE_FORMAT = "[%X]"

_handler: Optional[RichHandler] = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Handlers are attached once to the root logger by setup_logger(), so
    module loggers only need a name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logger(name: Optional[str] = None, level: Union[str, int] = "INFO") -> logging.Logger:
    """
    Configure logging output for a CLI run.

    Installs a RichHandler writing to stderr (stdout is reserved for tool
    output) and sets the level on the root logger. Calling it again only
    updates the level.

    Args:
        name: Logger to return after configuration
        level: Log level name or number

    Returns:
        Configured logger
    """
    global _handler

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()

    if _handler is None:
        _handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            log_time_format=DATE_FORMAT,
        )
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_handler)

    root.setLevel(level)
    _handler.setLevel(level)

    return logging.getLogger(name)
