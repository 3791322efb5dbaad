"""
Time and date utilities for feed windowing.

Key concepts:
  - Recency windows: registry feeds report how many entries were created in
    the last N days relative to a reference ``now``.
  - Upstream timestamps are untrusted strings; anything unparseable is
    treated as "not recent" rather than raising.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def to_iso(dt: datetime) -> str:
    """Format ``dt`` as ISO-8601 UTC with millisecond precision and a ``Z`` suffix.

    Matches the ``Date.prototype.toISOString()`` shape the dashboard parses.
    """
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse an upstream date/datetime string into an aware UTC datetime.

    Accepts ISO-8601 datetimes (with or without offset, ``Z`` suffix allowed)
    and bare ``YYYY-MM-DD`` dates.  Naive values are assumed to be UTC.

    Args:
        value: Raw field value from an upstream payload.

    Returns:
        Aware UTC datetime, or ``None`` if ``value`` is missing or malformed.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_within_days(value: object, now: datetime, days: int) -> bool:
    """Return True if ``value`` parses to a time less than ``days`` before ``now``.

    Timestamps in the future relative to ``now`` count as recent.
    Unparseable values never count.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return False
    return now - parsed < timedelta(days=days)
