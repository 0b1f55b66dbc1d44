"""
Timestamp helpers shared by the intelligence aggregators.

Rows arrive either as datetimes (SQLAlchemy) or ISO-8601 strings (JSON
payloads). Naive datetimes are treated as UTC.
"""
import math
from datetime import datetime, timezone
from typing import Optional, Union

from dateutil.parser import isoparse

Timestamp = Union[datetime, str, None]

SECONDS_PER_DAY = 60 * 60 * 24


def to_datetime(value: Timestamp) -> Optional[datetime]:
    """Coerce a row timestamp into an aware datetime, or None."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = isoparse(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def days_since(value: Timestamp, now: Optional[datetime] = None) -> Optional[int]:
    """Whole days elapsed since value (floored), None when value is missing."""
    moment = to_datetime(value)
    if moment is None:
        return None
    now = to_datetime(now) or utcnow()
    return math.floor((now - moment).total_seconds() / SECONDS_PER_DAY)


def days_between(start: Timestamp, end: Timestamp) -> float:
    """Fractional days from start to end, 0.0 when either is missing."""
    start_dt = to_datetime(start)
    end_dt = to_datetime(end)
    if start_dt is None or end_dt is None:
        return 0.0
    return (end_dt - start_dt).total_seconds() / SECONDS_PER_DAY


def latest(values) -> Optional[datetime]:
    """Most recent timestamp in an iterable, ignoring missing values."""
    moments = [m for m in (to_datetime(v) for v in values) if m is not None]
    return max(moments) if moments else None
