from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Any


def parse_clock(value: Any) -> time | None:
    """Parse time string in HH:MM format to time object."""
    if not isinstance(value, str):
        return None
    try:
        parts = value.strip().split(":")
        if len(parts) != 2:
            return None
        return time(hour=int(parts[0]), minute=int(parts[1]))
    except (ValueError, IndexError, AttributeError):
        return None


def coerce_minutes(value: Any) -> int:
    """Best-effort conversion of a user supplied duration to whole minutes.

    Malformed input is not an error: it becomes 0. Fractions are truncated
    and negative values clamp to 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return max(0, int(number))


def minutes_between(start: time, end: time, on: date | None = None) -> int:
    """Elapsed minutes from start to end; an end before start means the next day."""
    day = on or date.today()
    start_at = datetime.combine(day, start)
    end_at = datetime.combine(day, end)
    if end_at < start_at:
        end_at += timedelta(days=1)
    return round((end_at - start_at).total_seconds() / 60)


def resolve_duration(
    duration: Any = None,
    start_time: Any = None,
    end_time: Any = None,
    on: date | datetime | None = None,
) -> int:
    """Effective session length in minutes.

    A complete start/end clock pair wins over the explicit value. Without it
    the explicit duration is used, coerced leniently. Never negative.
    """
    start = parse_clock(start_time)
    end = parse_clock(end_time)
    if start is not None and end is not None:
        day = on.date() if isinstance(on, datetime) else on
        return minutes_between(start, end, day)
    return coerce_minutes(duration)
