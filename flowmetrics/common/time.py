"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def now_ms() -> int:
    """Return the current instant as integer milliseconds since the epoch."""
    return int(utcnow().timestamp() * 1000)
