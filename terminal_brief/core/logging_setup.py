"""
Logging setup for terminal-brief.

Log records go to stderr through rich so they never interleave with the
dashboard text on stdout.
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "terminal_brief"
MODULE_LOGGER = "brief.module"


def setup_logging(level: Union[str, int] = "WARNING",
                  console: Optional[Console] = None) -> None:
    """
    Configure the terminal-brief loggers.

    Args:
        level: Level name or number applied to all terminal-brief loggers
        console: Console to log to (defaults to a stderr console)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    for name in (ROOT_LOGGER, MODULE_LOGGER):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False


def get_module_logger(name: str) -> logging.Logger:
    """Get the logger for a dashboard module (e.g. brief.module.weather)."""
    return logging.getLogger(f"{MODULE_LOGGER}.{name}")
