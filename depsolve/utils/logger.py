"""
Logging utilities for depsolve.

The engine is a library first: every logger lives under the ``depsolve``
namespace and stays silent (``NullHandler``) until an application calls
:func:`setup_logging`. The search loop emits one DEBUG record per popped
state on the ``depsolve.search`` logger; that logger is held at INFO
unless tracing is requested explicitly, so ``-vv`` on the CLI does not
drown the user in per-state output.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from depsolve.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "depsolve"

#: Logger used by the search loop for per-state tracing.
SEARCH_LOGGER_NAME = f"{ROOT_LOGGER_NAME}.search"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in ANSI colors on a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not (self.use_color and self._should_use_color()):
            return super().format(record)

        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        # Restore the level name so other handlers see the plain value.
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original

    @staticmethod
    def _should_use_color() -> bool:
        if os.environ.get("NO_COLOR") or os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    trace_search: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure the ``depsolve`` logger hierarchy.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        level: Logging level for the ``depsolve`` namespace.
        verbose: Use the verbose format with timestamps and logger names.
        trace_search: Let per-state DEBUG records from the search loop
            through. Without it the search logger is capped at INFO.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )
        root_logger.addHandler(handler)
        root_logger.propagate = False

        search_logger = logging.getLogger(SEARCH_LOGGER_NAME)
        search_logger.setLevel(
            logging.NOTSET if trace_search else max(level, logging.INFO)
        )

        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the depsolve namespace.

    Args:
        name: Logger name, either relative (``"resolver"``) or already
            qualified (``"depsolve.resolver"``).

    Returns:
        A logger instance under the ``depsolve`` hierarchy.
    """
    if not name or name == ROOT_LOGGER_NAME:
        qualified = ROOT_LOGGER_NAME
    elif name.startswith(ROOT_LOGGER_NAME + "."):
        qualified = name
    else:
        qualified = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(qualified)
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True if :func:`setup_logging` has been called."""
    return _logging_configured


def disable_logging() -> None:
    """Silence all depsolve logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        logging.getLogger(SEARCH_LOGGER_NAME).setLevel(logging.NOTSET)
        _logging_configured = False
