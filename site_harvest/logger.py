"""Logging for **SiteHarvest**.

Every module logs through a child of the ``SiteHarvest`` logger
(:func:`get_logger`). The CLI calls :func:`configure` once; output goes to
stderr so that reports printed on stdout stay machine-readable.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteHarvest"

#: rotation threshold for the optional log file
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024


def configure(
    *,
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger.

    A stderr handler is always installed; *log_file* adds a rotating file
    next to it.
    """
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=LOG_FILE_MAX_BYTES, backupCount=3, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.propagate = False
    return root


def get_logger(suffix: str | None = None) -> logging.Logger:
    """Return the project logger or one of its children (``SiteHarvest.<suffix>``)."""
    return logging.getLogger(LOGGER_NAME if not suffix else f"{LOGGER_NAME}.{suffix}")


logger: logging.Logger = get_logger()

__all__ = ["logger", "configure", "get_logger", "LOGGER_NAME", "DEFAULT_FORMAT"]
