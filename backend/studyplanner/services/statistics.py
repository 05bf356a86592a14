from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence

from studyplanner.models.study_session import SessionType
from studyplanner.schemas.session import StudySessionPublic
from studyplanner.schemas.subject import SubjectPublic
from studyplanner.services.time_utils import (
    format_iso_date,
    iter_days,
    normalize,
    parse_iso_date,
    start_of_week,
)

STUDY_LABEL = "Estudio"
TOTAL_KEY = "total"


@dataclass
class SubjectTotal:
    subject_id: int
    name: str
    color: str
    total_minutes: int = 0
    breakdown: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class StudySummary:
    total_minutes: int
    session_count: int
    week_minutes: int
    today_minutes: int


def type_label(session_type: SessionType | str) -> str:
    """study and pomodoro share one label, the rest keep their own."""
    value = session_type.value if isinstance(session_type, SessionType) else str(session_type)
    if value in (SessionType.STUDY.value, SessionType.POMODORO.value):
        return STUDY_LABEL
    return value.capitalize()


def series_key(subject_id: int) -> str:
    return f"subject_{subject_id}"


def subject_totals(
    subjects: Iterable[SubjectPublic], sessions: Iterable[StudySessionPublic]
) -> list[SubjectTotal]:
    """Minutes per subject with a per-type breakdown, largest first.

    Subjects without any recorded minutes are left out.
    """
    sessions_by_subject: dict[int, list[StudySessionPublic]] = defaultdict(list)
    for session in sessions:
        if session.subject_id is not None:
            sessions_by_subject[session.subject_id].append(session)

    totals: list[SubjectTotal] = []
    for subject in subjects:
        entry = SubjectTotal(subject_id=subject.id, name=subject.name, color=subject.color)
        breakdown: dict[str, int] = defaultdict(int)
        for session in sessions_by_subject.get(subject.id, []):
            entry.total_minutes += session.duration
            breakdown[type_label(session.type)] += session.duration
        entry.breakdown = dict(breakdown)
        if entry.total_minutes > 0:
            totals.append(entry)
    totals.sort(key=lambda item: item.total_minutes, reverse=True)
    return totals


def _combine_all(selected: set[int], all_subject_ids: set[int] | None) -> bool:
    if not selected:
        return True
    return all_subject_ids is not None and selected == all_subject_ids


def cumulative_series(
    sessions: Iterable[StudySessionPublic],
    start_date: str,
    end_date: str,
    subject_ids: Sequence[int] | None = None,
    all_subject_ids: Sequence[int] | None = None,
    max_days: int | None = None,
) -> list[dict[str, int | str]]:
    """Running study minutes for every day of [start_date, end_date].

    An empty selection, or one covering every subject, yields a single
    combined ``total`` series that also counts sessions without a subject.
    Otherwise only the selected subjects count and each gets its own
    ``subject_<id>`` field next to ``total``. Days without sessions repeat
    the previous cumulative values, so there is exactly one row per day.
    A range longer than max_days raises ValueError.
    """
    start = parse_iso_date(start_date)
    end = parse_iso_date(end_date)
    if start > end:
        return []
    if max_days is not None and (end - start).days + 1 > max_days:
        raise ValueError(f"Date range is limited to {max_days} days")

    selected = set(subject_ids or [])
    combine_all = _combine_all(selected, set(all_subject_ids) if all_subject_ids is not None else None)

    daily_total: dict[datetime, int] = defaultdict(int)
    daily_by_subject: dict[datetime, dict[int, int]] = defaultdict(lambda: defaultdict(int))
    for session in sessions:
        day = normalize(session.date)
        if day < start or day > end:
            continue
        if not combine_all and session.subject_id not in selected:
            continue
        daily_total[day] += session.duration
        if not combine_all:
            daily_by_subject[day][session.subject_id] += session.duration

    tracked = [] if combine_all else sorted(selected)
    running_total = 0
    running_by_subject = {subject_id: 0 for subject_id in tracked}
    rows: list[dict[str, int | str]] = []
    for day in iter_days(start, end):
        running_total += daily_total.get(day, 0)
        row: dict[str, int | str] = {"date": format_iso_date(day), TOTAL_KEY: running_total}
        for subject_id in tracked:
            running_by_subject[subject_id] += daily_by_subject.get(day, {}).get(subject_id, 0)
            row[series_key(subject_id)] = running_by_subject[subject_id]
        rows.append(row)
    return rows


def study_summary(
    sessions: Iterable[StudySessionPublic], today: date | datetime | None = None
) -> StudySummary:
    today_key = normalize(today or datetime.now())
    week_start = start_of_week(today_key)
    total = week = day = count = 0
    for session in sessions:
        session_day = normalize(session.date)
        count += 1
        total += session.duration
        if week_start <= session_day <= today_key:
            week += session.duration
        if session_day == today_key:
            day += session.duration
    return StudySummary(
        total_minutes=total,
        session_count=count,
        week_minutes=week,
        today_minutes=day,
    )
