"""Centralized logging helpers.

Every module logs through ``logging.getLogger(__name__)``; this module owns
root configuration plus the small helpers used to attach structured context
to DEBUG traces without leaking credentials into log output.
"""
from __future__ import annotations

import logging
import os
import re
import sys
import time
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..constants import Constants

_SENSITIVE_QUERY_KEYS = {"token", "access_token", "private_token", "api_key", "key"}
_TOKEN_PATTERN = re.compile(r"\b(gh[pousr]_[A-Za-z0-9]{16,}|github_pat_[A-Za-z0-9_]{20,})\b")
_REDACTED = "[REDACTED]"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger.

    The level is taken from ``level`` or the COMPOSERFORK_LOG_LEVEL environment
    variable, defaulting to INFO. Calling this more than once replaces the
    handler rather than stacking duplicates.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_composerfork", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler._composerfork = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted for ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build the ``extra=`` mapping for a structured log record.

    None values are dropped so records only carry the fields that apply.
    """
    return {key: value for key, value in fields.items() if value is not None}


def redact(text: str) -> str:
    """Replace anything that looks like a GitHub token with a placeholder."""
    if not text:
        return text
    return _TOKEN_PATTERN.sub(_REDACTED, text)


def safe_url(url: str) -> str:
    """Return ``url`` with credentials and sensitive query values removed."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = f"{_REDACTED}@{netloc.split('@', 1)[1]}"
    query = parts.query
    if query:
        pairs = [
            (key, _REDACTED if key.lower() in _SENSITIVE_QUERY_KEYS else value)
            for key, value in parse_qsl(query, keep_blank_values=True)
        ]
        query = urlencode(pairs, safe="[]")
    return redact(urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment)))


class Timer:
    """Context manager measuring elapsed wall time in milliseconds."""

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Milliseconds since entry, or until exit once the block has finished."""
        if self._start is None:
            return 0
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
