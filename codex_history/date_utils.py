"""Shared date parsing helpers for filter bounds and record timestamps."""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LOCAL_DATE_FORMATS = ("%Y/%m/%d", "%m/%d/%Y", "%Y-%m-%d %H:%M:%S", "%Y/%m/%d %H:%M:%S")


def _parse_datetime_token(token: str) -> datetime | None:
    cleaned = token.strip()
    if not cleaned:
        return None
    if _DATE_ONLY_RE.match(cleaned):
        try:
            parsed = date.fromisoformat(cleaned)
        except ValueError:
            return None
        return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)
    try:
        return datetime.fromisoformat(cleaned.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError:
        pass
    for fmt in _LOCAL_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def to_epoch_ms(value: Any) -> float | None:
    """Convert a date string into epoch milliseconds.

    Date-only values are read as UTC midnight, values with a `Z` suffix or an
    explicit offset are absolute, and naive date-times are local time.
    Returns None when the value cannot be parsed.
    """
    if not isinstance(value, str):
        return None
    parsed = _parse_datetime_token(value)
    if parsed is None:
        return None
    try:
        # Naive datetimes resolve against the local timezone.
        return parsed.timestamp() * 1000
    except (OverflowError, OSError, ValueError):
        return None


def format_local_minute(epoch_ms: float) -> str:
    """Render epoch milliseconds as `YYYY-MM-DD HH:MM` local time, or `-`."""
    try:
        return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError, TypeError):
        return "-"
