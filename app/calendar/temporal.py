"""Timezone-naive parsing and calendar-date bucketing of event times.

Event times are stored as wall-clock strings without an offset, e.g.
``2024-03-15T09:30``. They are read by splitting on the literal separators
and building a naive datetime from the numbers. Running them through an
ISO-8601 parser that attaches UTC or the host timezone would shift the
displayed date by the offset, which is exactly what this module avoids.
"""
import enum
import re
from datetime import datetime

import pytz

_DATE_TIME_SPLIT = re.compile(r"[-:T]")


class Bucket(str, enum.Enum):
    TODAY = "today"
    UPCOMING = "upcoming"
    EXPIRED = "expired"


def parse_local(value: str) -> datetime:
    """
    Parse a naive local date-time string.

    Accepted forms:
        YYYY-MM-DD
        YYYY-MM-DDTHH:MM
        YYYY-MM-DDTHH:MM:SS

    The time part defaults to 00:00. Raises ValueError for anything else.
    """
    if not value:
        raise ValueError("Empty date-time")

    parts = _DATE_TIME_SPLIT.split(value.strip())
    if len(parts) not in (3, 5, 6) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Malformed date-time: {value!r}")

    year, month, day = (int(p) for p in parts[:3])
    hour, minute, second = 0, 0, 0
    if len(parts) >= 5:
        hour, minute = int(parts[3]), int(parts[4])
    if len(parts) == 6:
        second = int(parts[5])

    # datetime() rejects out-of-range components (month 13, Feb 30, hour 24)
    return datetime(year, month, day, hour, minute, second)


def classify(instant: datetime, reference_now: datetime) -> Bucket:
    """
    Bucket an instant by calendar date relative to reference_now.

    Same date is TODAY even when the start time has already passed.
    """
    event_date = instant.date()
    today = reference_now.date()
    if event_date == today:
        return Bucket.TODAY
    if event_date > today:
        return Bucket.UPCOMING
    return Bucket.EXPIRED


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time in the given zone, without tzinfo."""
    return datetime.now(pytz.timezone(tz_name)).replace(tzinfo=None)
