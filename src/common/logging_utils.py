"""Logging helpers shared across the CLI, upstream client and installers.

Keeps console output terse (``[LEVEL] message``) while allowing structured
DEBUG traces through ``extra`` fields that a file handler can pick up.
"""
from __future__ import annotations

import logging
import os
import sys
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _level_from_env() -> int:
    """Return the log level requested through the environment."""
    name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").strip().upper()
    if name not in _VALID_LEVELS:
        name = "INFO"
    return getattr(logging, name)


def configure_logging() -> None:
    """Install the console handler on the root logger.

    Safe to call more than once; an existing console handler is reused and
    only its level is refreshed.
    """
    root = logging.getLogger()
    level = _level_from_env()
    root.setLevel(level)

    for handler in root.handlers:
        if getattr(handler, "_bob_console", False):
            handler.setLevel(level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler.setLevel(level)
    handler._bob_console = True  # pylint: disable=protected-access
    root.addHandler(handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when the logger would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    None values are dropped so formatters never see half-filled records.
    """
    return {k: v for k, v in fields.items() if v is not None}


def safe_url(url: Optional[str]) -> str:
    """Strip credentials and query strings from a URL before logging it."""
    if not url:
        return ""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urllib.parse.urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
