"""Logging setup shared by the CLI, the API server and the sync layer."""

import logging
import sys
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: Optional[logging.Handler] = None


def setup_logging(level: Union[int, str] = logging.WARNING, json_format: bool = False) -> None:
    """
    Configure the root logger to write to stderr.

    With ``json_format`` each record is emitted as one JSON object per line.
    Calling this again replaces the handler installed by the previous call.
    """
    global _handler

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.addHandler(handler)
    root.setLevel(level)
    _handler = handler


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module."""
    return logging.getLogger(name)
