"""Merge study sessions and subject important dates into one timeline."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Literal, Union

from studyplanner.models.study_session import SessionType
from studyplanner.schemas.session import StudySessionPublic
from studyplanner.schemas.subject import ImportantDate, SubjectPublic
from studyplanner.services.time_utils import format_iso_date, normalize, parse_iso_date

SESSION_LIKE_TYPES = frozenset({SessionType.STUDY.value, SessionType.POMODORO.value})


class ActivityKind(str, Enum):
    SESSION = "session"
    EVENT = "event"


@dataclass(frozen=True)
class SessionActivity:
    id: int
    subject_id: int | None
    subject_name: str | None
    normalized_date: datetime
    type: str
    duration: int
    description: str | None
    start_time: str | None
    end_time: str | None
    kind: Literal[ActivityKind.SESSION] = ActivityKind.SESSION

    @property
    def label(self) -> str:
        return self.description or self.subject_name or "Sesión de estudio"


@dataclass(frozen=True)
class EventActivity:
    id: str
    subject_id: int
    subject_name: str
    normalized_date: datetime
    type: str
    description: str
    kind: Literal[ActivityKind.EVENT] = ActivityKind.EVENT

    @property
    def label(self) -> str:
        return self.description or self.subject_name


Activity = Union[SessionActivity, EventActivity]


def event_activity_id(subject_id: int, important_date: ImportantDate) -> str:
    return "-".join(
        [
            str(subject_id),
            important_date.date.isoformat(),
            important_date.type.value,
            important_date.description,
        ]
    )


def session_to_activity(
    session: StudySessionPublic, subject_names: dict[int, str] | None = None
) -> SessionActivity:
    subject_names = subject_names or {}
    return SessionActivity(
        id=session.id,
        subject_id=session.subject_id,
        subject_name=subject_names.get(session.subject_id) if session.subject_id else None,
        normalized_date=normalize(session.date),
        type=session.type.value,
        duration=session.duration,
        description=session.description,
        start_time=session.start_time,
        end_time=session.end_time,
    )


def important_date_to_activity(
    subject: SubjectPublic, important_date: ImportantDate
) -> EventActivity:
    return EventActivity(
        id=event_activity_id(subject.id, important_date),
        subject_id=subject.id,
        subject_name=subject.name,
        normalized_date=parse_iso_date(important_date.date.isoformat()),
        type=important_date.type.value,
        description=important_date.description,
    )


def merge_timeline(
    subjects: Iterable[SubjectPublic], sessions: Iterable[StudySessionPublic]
) -> list[Activity]:
    """All sessions followed by all important dates. No ordering is implied."""
    subjects = list(subjects)
    subject_names = {subject.id: subject.name for subject in subjects}
    activities: list[Activity] = [
        session_to_activity(session, subject_names) for session in sessions
    ]
    for subject in subjects:
        for important_date in subject.important_dates:
            activities.append(important_date_to_activity(subject, important_date))
    return activities


def is_session_like(activity: Activity) -> bool:
    """study/pomodoro render as sessions; every other type renders as an event."""
    if isinstance(activity, (SessionActivity, EventActivity)):
        return activity.type in SESSION_LIKE_TYPES
    raise TypeError(f"Unknown activity variant: {type(activity).__name__}")


def activity_to_dict(activity: Activity) -> dict:
    if isinstance(activity, SessionActivity):
        return {
            "kind": activity.kind.value,
            "id": activity.id,
            "subject_id": activity.subject_id,
            "subject_name": activity.subject_name,
            "date": format_iso_date(activity.normalized_date),
            "type": activity.type,
            "label": activity.label,
            "duration": activity.duration,
            "description": activity.description,
            "start_time": activity.start_time,
            "end_time": activity.end_time,
        }
    if isinstance(activity, EventActivity):
        return {
            "kind": activity.kind.value,
            "id": activity.id,
            "subject_id": activity.subject_id,
            "subject_name": activity.subject_name,
            "date": format_iso_date(activity.normalized_date),
            "type": activity.type,
            "label": activity.label,
            "duration": None,
            "description": activity.description,
            "start_time": None,
            "end_time": None,
        }
    raise TypeError(f"Unknown activity variant: {type(activity).__name__}")
