"""
polycache - Logging Setup

Modules log through ``logging.getLogger(__name__)``; this helper configures the
root handler for applications that do not do so themselves.
"""

import logging

from .config import LogLevel, get_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: LogLevel | str | int | None = None) -> None:
    """
    Configure root logging with the standard polycache format.

    Args:
        level: Log level name, LogLevel member or numeric level.
               Defaults to the configured ``log_level``.
    """
    if level is None:
        level = get_config().log_level

    if isinstance(level, LogLevel):
        level = level.value

    logging.basicConfig(level=level, format=LOG_FORMAT)
