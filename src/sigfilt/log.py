"""Logging setup for applications embedding sigfilt.

The library itself only creates module loggers under the ``sigfilt``
namespace and stays silent until an application calls
:func:`configure_logging` (or configures ``logging`` on its own).

Usage:
    from sigfilt.log import configure_logging

    configure_logging("DEBUG")
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

from sigfilt.config import get_settings

ROOT_LOGGER_NAME = "sigfilt"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the sigfilt namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    level: Optional[int | str] = None,
    stream: Optional[IO[str]] = None,
    format_string: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Attach a single stream handler to the sigfilt logger.

    Calling it again replaces the previously attached handler.

    Args:
        level: Logging level; defaults to the active settings' ``log_level``.
        stream: Output stream (stderr if None).
        format_string: Record format.

    Returns:
        The configured package logger.
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    for handler in list(root.handlers):
        if not isinstance(handler, logging.NullHandler):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    return root
