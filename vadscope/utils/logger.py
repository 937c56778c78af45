#!/usr/bin/env python3
"""
Logging setup for the vadscope command line and embedding applications.

Library modules only call ``logging.getLogger("vadscope")`` and never add
handlers; ``setup_logger()`` is where console and file output get attached.
"""

import io
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

LOGGER_NAME = "vadscope"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
# Segment offsets are easier to trace back with the emitting module
FILE_FORMAT = "%(asctime)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"


class UTF8StreamHandler(logging.StreamHandler):
    """Console handler writing UTF-8 to stderr whatever the terminal encoding."""

    def __init__(self, stream: Optional[TextIO] = None):
        if stream is None:
            stream = io.TextIOWrapper(
                sys.stderr.buffer,
                encoding="utf-8",
                errors="replace",
                line_buffering=True,
            )
        super().__init__(stream)


def setup_logger(name: str = LOGGER_NAME,
                 log_level: str = "INFO",
                 log_file: Optional[str] = None,
                 stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach console (and optionally file) output to the vadscope logger.

    Calling it again replaces the previous handlers, so the CLI can be
    invoked repeatedly in one process without duplicated lines.

    Args:
        name: Logger name
        log_level: DEBUG, INFO, WARNING or ERROR; unknown names fall back to INFO
        log_file: Optional path; parent directories are created
        stream: Console stream (default: UTF-8 wrapper around stderr)
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = UTF8StreamHandler(stream)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8", errors="replace")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger
