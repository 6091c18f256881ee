"""
Logging setup for the Intcode toolkit.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are attached here, by the command-line front end.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler

from .config import (
    DEFAULT_LOG_LEVEL, DEFAULT_CONSOLE_LEVEL, LOG_FORMAT, LOG_DATEFMT,
)


def setup_logging(
    name: str = "intcode_vm",
    level: int = DEFAULT_LOG_LEVEL,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Console output goes through rich (WARNING+ by default); when
    ``log_file`` is given, everything from ``level`` up is also written
    there in the pipe-separated file format.

    Calling this twice is harmless: an already configured logger is
    returned unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(min(level, console_level))

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logger.addHandler(fh)

    if rich_console:
        ch = RichHandler(
            level=console_level,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S",
        ))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.debug("Logger initialized: %s (console level %s)",
                 name, logging.getLevelName(console_level))
    if log_file is not None:
        logger.debug("Log file: %s", log_file)

    return logger
