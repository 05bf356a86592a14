from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable

from studyplanner.services.time_utils import (
    add_days,
    add_months,
    days_in_month,
    first_weekday_of_month,
    format_iso_date,
    leading_blanks,
    month_name,
    normalize,
    start_of_week,
    weekday_name,
)
from studyplanner.services.timeline import Activity, is_session_like


class CalendarView(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class CalendarCell:
    date: datetime | None
    activities: tuple[Activity, ...] = ()
    is_today: bool = False

    @property
    def is_blank(self) -> bool:
        return self.date is None

    @property
    def session_like(self) -> tuple[Activity, ...]:
        return tuple(activity for activity in self.activities if is_session_like(activity))

    @property
    def event_like(self) -> tuple[Activity, ...]:
        return tuple(activity for activity in self.activities if not is_session_like(activity))


@dataclass(frozen=True)
class CalendarGrid:
    view: CalendarView
    reference: datetime
    title: str
    previous: datetime | None
    next: datetime | None
    cells: tuple[CalendarCell, ...] = field(default_factory=tuple)


def group_by_day(activities: Iterable[Activity]) -> dict[datetime, list[Activity]]:
    buckets: dict[datetime, list[Activity]] = defaultdict(list)
    for activity in activities:
        buckets[activity.normalized_date].append(activity)
    return buckets


def navigate(reference: date | datetime, view: CalendarView, step: int = 1) -> datetime | None:
    """Move the reference date by step whole views (negative goes back).

    Returns None when the target falls outside years 1..9999.
    """
    view = CalendarView(view)
    try:
        if view == CalendarView.MONTHLY:
            return add_months(reference, step)
        if view == CalendarView.WEEKLY:
            return add_days(reference, 7 * step)
        return add_days(reference, step)
    except OverflowError:
        return None


def grid_title(reference: date | datetime, view: CalendarView) -> str:
    if view == CalendarView.MONTHLY:
        return f"{month_name(reference)} {reference.year}"
    if view == CalendarView.WEEKLY:
        monday = start_of_week(reference)
        try:
            sunday = add_days(monday, 6)
        except OverflowError:
            sunday = normalize(datetime.max)
        return f"{format_iso_date(monday)} / {format_iso_date(sunday)}"
    if view == CalendarView.DAILY:
        return f"{weekday_name(reference)} {format_iso_date(reference)}"
    raise ValueError(f"Unknown calendar view: {view}")


def _cell_days(reference: datetime, view: CalendarView) -> list[datetime | None]:
    """Dates of the cells for a view, None for a blank cell."""
    if view == CalendarView.MONTHLY:
        first = datetime(reference.year, reference.month, 1)
        blanks: list[datetime | None] = [None] * leading_blanks(first_weekday_of_month(reference))
        return blanks + [add_days(first, offset) for offset in range(days_in_month(reference))]
    if view == CalendarView.WEEKLY:
        monday = start_of_week(reference)
        days: list[datetime | None] = []
        for offset in range(7):
            try:
                days.append(add_days(monday, offset))
            except OverflowError:
                # the last week of year 9999 runs past the calendar
                days.append(None)
        return days
    if view == CalendarView.DAILY:
        return [reference]
    raise ValueError(f"Unknown calendar view: {view}")


def build_grid(
    activities: Iterable[Activity],
    reference: date | datetime,
    view: CalendarView,
    today: date | datetime | None = None,
) -> CalendarGrid:
    """Lay out the cells for a view around reference and fill them.

    Month grids are Monday-first, so they open with 0-6 blank cells.
    previous/next are None at the edges of the supported calendar.
    """
    view = CalendarView(view)
    reference = normalize(reference)
    today_key = normalize(today or datetime.now())
    buckets = group_by_day(activities)

    cells: list[CalendarCell] = []
    for day in _cell_days(reference, view):
        if day is None:
            cells.append(CalendarCell(date=None))
            continue
        cells.append(
            CalendarCell(
                date=day,
                activities=tuple(buckets.get(day, ())),
                is_today=day == today_key,
            )
        )

    return CalendarGrid(
        view=view,
        reference=reference,
        title=grid_title(reference, view),
        previous=navigate(reference, view, -1),
        next=navigate(reference, view, 1),
        cells=tuple(cells),
    )
