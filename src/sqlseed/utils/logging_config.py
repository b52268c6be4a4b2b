"""Logging configuration."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str | None = None, stream: TextIO | None = None) -> None:
    """
    Configure root logging for sqlseed.

    Replaces any existing root handlers with a single stream handler.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR). Case insensitive.
            Unknown or missing levels fall back to INFO.
        stream: Destination stream, stdout by default
    """
    level = logging.INFO
    if log_level:
        level = getattr(logging, log_level.upper(), logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger."""
    return logging.getLogger(name)
