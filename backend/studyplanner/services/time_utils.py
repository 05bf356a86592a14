"""Local-calendar helpers shared by the calendar and statistics code.

Every day bucket in the planner is keyed by a naive datetime at local
midnight. Weekday numbers follow the Sunday-first convention (0=Sunday ..
6=Saturday) used by the client when it lays out grids; weeks themselves
start on Monday.
"""
from __future__ import annotations

import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Iterator

WEEKDAY_NAMES = ["Domingo", "Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado"]
WEEKDAY_HEADERS = ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]
MONTH_NAMES = [
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
]


def normalize(value: date | datetime) -> datetime:
    """Truncate to 00:00:00 local time.

    Aware datetimes are converted to the local zone first. Plain dates become
    midnight of that day. Normalizing twice is a no-op.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime(value.year, value.month, value.day)


def same_day(first: date | datetime, second: date | datetime) -> bool:
    return normalize(first) == normalize(second)


def format_iso_date(value: date | datetime) -> str:
    """Render YYYY-MM-DD from local calendar fields, never from UTC."""
    local = normalize(value)
    return f"{local.year:04d}-{local.month:02d}-{local.day:02d}"


def parse_iso_date(text: str) -> datetime:
    """Parse YYYY-MM-DD into a normalized datetime. Raises ValueError."""
    if not isinstance(text, str):
        raise ValueError(f"Expected a YYYY-MM-DD string, got {text!r}")
    return normalize(datetime.strptime(text.strip(), "%Y-%m-%d"))


def sunday_first_weekday(value: date | datetime) -> int:
    """0=Sunday .. 6=Saturday."""
    return (value.weekday() + 1) % 7


def start_of_week(value: date | datetime) -> datetime:
    """Monday of the week containing value."""
    weekday = sunday_first_weekday(value)
    offset = -6 if weekday == 0 else 1 - weekday
    return normalize(value) + timedelta(days=offset)


def days_in_month(value: date | datetime) -> int:
    return calendar.monthrange(value.year, value.month)[1]


def first_weekday_of_month(value: date | datetime) -> int:
    return sunday_first_weekday(date(value.year, value.month, 1))


def leading_blanks(first_weekday: int) -> int:
    """Blank cells before day 1 in a Monday-first month grid."""
    return 6 if first_weekday == 0 else first_weekday - 1


def add_days(value: date | datetime, days: int) -> datetime:
    """Raises OverflowError past year 1 or 9999."""
    return normalize(value) + timedelta(days=days)


def add_months(value: date | datetime, months: int) -> datetime:
    """Shift by whole months, pinned to day 1 so month lengths never drift."""
    index = value.year * 12 + (value.month - 1) + months
    year = index // 12
    if not MINYEAR <= year <= MAXYEAR:
        raise OverflowError(f"year {year} is out of range")
    return datetime(year, index % 12 + 1, 1)


def iter_days(start: date | datetime, end: date | datetime) -> Iterator[datetime]:
    """Every day from start to end inclusive, ascending."""
    cursor = normalize(start)
    last = normalize(end)
    while cursor <= last:
        yield cursor
        if cursor == last:
            break
        cursor += timedelta(days=1)


def weekday_name(value: date | datetime) -> str:
    return WEEKDAY_NAMES[sunday_first_weekday(value)]


def month_name(value: date | datetime) -> str:
    return MONTH_NAMES[value.month - 1]
