"""
Logging setup for the app, done once at startup.

Modules log through ``logging.getLogger(__name__)``; this only configures
the root handler, format and level.
"""

import logging
import sys
from typing import Final
from logging import Logger, StreamHandler


LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str = "budget", level: str = "INFO") -> Logger:
    """
    Configure stdout logging and return a named logger.

    ``level`` is a level name ("DEBUG", "info", ...); unknown names fall
    back to INFO.
    """
    log_levels: dict[str, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    log_level = log_levels.get(level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,  # Streamlit reruns the script, replace the previous config
    )

    return logging.getLogger(name)
