"""CRUD for the planner collections, scoped to one user.

Every mutation returns an OperationResult instead of raising, so callers
(HTTP routes, the pomodoro timer) can surface the message and keep going.
Successful writes re-read the affected collections and publish them to the
user's store as fresh snapshots.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studyplanner.core.config import get_settings
from studyplanner.models.study_session import SessionType, StudySession
from studyplanner.models.subject import Subject
from studyplanner.models.todo import Todo
from studyplanner.schemas.session import (
    StudySessionCreate,
    StudySessionPublic,
    StudySessionUpdate,
)
from studyplanner.schemas.subject import (
    ImportantDate,
    SubjectCreate,
    SubjectPublic,
    SubjectUpdate,
)
from studyplanner.schemas.todo import TodoCreate, TodoPublic, TodoUpdate
from studyplanner.services.durations import coerce_minutes, parse_clock, resolve_duration
from studyplanner.services.store import PlannerStore

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class OperationResult:
    success: bool
    error: str | None = None
    kind: ErrorKind | None = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> "OperationResult":
        return cls(success=False, error=error, kind=kind)


def _local_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    return datetime.combine(value, time())


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _validate_important_dates(important_dates: list[ImportantDate]) -> str | None:
    seen = set()
    for item in important_dates:
        key = (item.type, item.date, item.description)
        if key in seen:
            return (
                f"Duplicate important date: {item.type.value} on "
                f"{item.date.isoformat()}"
            )
        seen.add(key)
    return None


def _validate_clock_pair(start_time: str | None, end_time: str | None) -> str | None:
    if _blank(start_time) != _blank(end_time):
        return "Start and end time must be provided together"
    for value in (start_time, end_time):
        if not _blank(value) and parse_clock(value) is None:
            return f"Invalid time '{value}', expected HH:MM"
    return None


class PlannerService:
    def __init__(self, db: Session, owner_id: str, store: PlannerStore | None = None):
        self.db = db
        self.owner_id = owner_id
        self.store = store or PlannerStore()

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def _load_subjects(self) -> list[SubjectPublic]:
        subjects = (
            self.db.query(Subject)
            .filter(Subject.owner_id == self.owner_id)
            .order_by(Subject.id.asc())
            .all()
        )
        return [SubjectPublic.model_validate(subject) for subject in subjects]

    def _load_sessions(self) -> list[StudySessionPublic]:
        sessions = (
            self.db.query(StudySession)
            .filter(StudySession.owner_id == self.owner_id)
            .order_by(StudySession.date.desc(), StudySession.id.desc())
            .all()
        )
        return [StudySessionPublic.model_validate(session) for session in sessions]

    def _load_todos(self) -> list[TodoPublic]:
        todos = (
            self.db.query(Todo)
            .filter(Todo.owner_id == self.owner_id)
            .order_by(Todo.created_at.desc(), Todo.id.desc())
            .all()
        )
        return [TodoPublic.model_validate(todo) for todo in todos]

    def refresh(self) -> PlannerStore:
        """Re-read every collection and publish the snapshot."""
        self.store.publish(
            subjects=self._load_subjects(),
            sessions=self._load_sessions(),
            todos=self._load_todos(),
        )
        return self.store

    def _commit(self, action: str) -> OperationResult | None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            message = str(getattr(exc, "orig", None) or exc)
            logger.error(f"Failed to {action} for owner {self.owner_id}: {message}")
            return OperationResult.fail(ErrorKind.PERSISTENCE, message)
        return None

    def _get_owned(self, model, object_id: int):
        return (
            self.db.query(model)
            .filter(model.id == object_id, model.owner_id == self.owner_id)
            .first()
        )

    # ------------------------------------------------------------------
    # Subjects
    # ------------------------------------------------------------------

    def add_subject(self, data: SubjectCreate) -> OperationResult:
        if _blank(data.name):
            return OperationResult.fail(ErrorKind.VALIDATION, "Subject name is required")
        error = _validate_important_dates(data.important_dates)
        if error:
            return OperationResult.fail(ErrorKind.VALIDATION, error)

        subject = Subject(
            owner_id=self.owner_id,
            name=data.name.strip(),
            professor=None if _blank(data.professor) else data.professor.strip(),
            color=data.color or get_settings().default_subject_color,
            important_dates=[item.model_dump(mode="json") for item in data.important_dates],
        )
        self.db.add(subject)
        failure = self._commit("create subject")
        if failure:
            return failure
        self.db.refresh(subject)
        logger.info(f"Subject added: {subject.id} | {subject.name}")
        self.refresh()
        return OperationResult.ok(SubjectPublic.model_validate(subject))

    def update_subject(self, subject_id: int, data: SubjectUpdate) -> OperationResult:
        subject = self._get_owned(Subject, subject_id)
        if not subject:
            logger.warning(f"Subject not found for edit: subject_id={subject_id}, owner={self.owner_id}")
            return OperationResult.fail(ErrorKind.NOT_FOUND, "Subject not found")

        changes = data.dict(exclude_unset=True)
        if "name" in changes:
            if _blank(changes["name"]):
                return OperationResult.fail(ErrorKind.VALIDATION, "Subject name is required")
            changes["name"] = changes["name"].strip()
        if "important_dates" in changes:
            important_dates = data.important_dates or []
            error = _validate_important_dates(important_dates)
            if error:
                return OperationResult.fail(ErrorKind.VALIDATION, error)
            changes["important_dates"] = [item.model_dump(mode="json") for item in important_dates]
        if "color" in changes and not changes["color"]:
            changes["color"] = get_settings().default_subject_color

        for key, value in changes.items():
            setattr(subject, key, value)
        self.db.add(subject)
        failure = self._commit("update subject")
        if failure:
            return failure
        self.db.refresh(subject)
        logger.info(f"Subject edited: {subject.id}")
        self.refresh()
        return OperationResult.ok(SubjectPublic.model_validate(subject))

    def delete_subject(self, subject_id: int) -> OperationResult:
        """Delete a subject and every session that references it, atomically."""
        subject = self._get_owned(Subject, subject_id)
        if not subject:
            logger.warning(f"Subject not found for delete: subject_id={subject_id}, owner={self.owner_id}")
            return OperationResult.fail(ErrorKind.NOT_FOUND, "Subject not found")
        try:
            removed = (
                self.db.query(StudySession)
                .filter(
                    StudySession.owner_id == self.owner_id,
                    StudySession.subject_id == subject_id,
                )
                .delete(synchronize_session=False)
            )
            self.db.delete(subject)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Cascade delete of subject {subject_id} failed: {exc}")
            return OperationResult.fail(
                ErrorKind.PERSISTENCE, "Could not delete the subject and its sessions"
            )
        logger.info(f"Subject deleted: {subject_id} (with {removed} sessions)")
        self.refresh()
        return OperationResult.ok()

    # ------------------------------------------------------------------
    # Study sessions
    # ------------------------------------------------------------------

    def _check_subject(self, subject_id: int | None) -> str | None:
        if subject_id is None:
            return None
        if not self._get_owned(Subject, subject_id):
            return f"Unknown subject {subject_id}"
        return None

    def add_study_session(self, data: StudySessionCreate) -> OperationResult:
        if data.date is None:
            return OperationResult.fail(ErrorKind.VALIDATION, "Session date is required")
        error = _validate_clock_pair(data.start_time, data.end_time) or self._check_subject(
            data.subject_id
        )
        if error:
            return OperationResult.fail(ErrorKind.VALIDATION, error)

        when = _local_datetime(data.date)
        has_clock = not _blank(data.start_time)
        session = StudySession(
            owner_id=self.owner_id,
            subject_id=data.subject_id,
            date=when,
            duration=resolve_duration(data.duration, data.start_time, data.end_time, on=when),
            type=data.type,
            description=None if _blank(data.description) else data.description.strip(),
            start_time=data.start_time.strip() if has_clock else None,
            end_time=data.end_time.strip() if has_clock else None,
        )
        self.db.add(session)
        failure = self._commit("create study session")
        if failure:
            return failure
        self.db.refresh(session)
        logger.info(f"StudySession added: {session.id}")
        self.refresh()
        return OperationResult.ok(StudySessionPublic.model_validate(session))

    def update_study_session(self, session_id: int, data: StudySessionUpdate) -> OperationResult:
        session = self._get_owned(StudySession, session_id)
        if not session:
            logger.warning(f"Session not found for edit: session_id={session_id}, owner={self.owner_id}")
            return OperationResult.fail(ErrorKind.NOT_FOUND, "Session not found")

        changes = data.dict(exclude_unset=True)
        if "date" in changes and changes["date"] is None:
            return OperationResult.fail(ErrorKind.VALIDATION, "Session date is required")
        start_time = changes.get("start_time", session.start_time)
        end_time = changes.get("end_time", session.end_time)
        error = _validate_clock_pair(start_time, end_time)
        if not error and "subject_id" in changes:
            error = self._check_subject(changes["subject_id"])
        if error:
            return OperationResult.fail(ErrorKind.VALIDATION, error)

        if "date" in changes:
            session.date = _local_datetime(changes["date"])
        if "subject_id" in changes:
            session.subject_id = changes["subject_id"]
        if changes.get("type") is not None:
            session.type = changes["type"]
        if "description" in changes:
            description = changes["description"]
            session.description = None if _blank(description) else description.strip()

        has_clock = not _blank(start_time)
        session.start_time = start_time.strip() if has_clock else None
        session.end_time = end_time.strip() if has_clock else None
        explicit = changes["duration"] if "duration" in changes else session.duration
        session.duration = resolve_duration(
            explicit, session.start_time, session.end_time, on=session.date
        )

        self.db.add(session)
        failure = self._commit("update study session")
        if failure:
            return failure
        self.db.refresh(session)
        logger.info(f"StudySession edited: {session.id}")
        self.refresh()
        return OperationResult.ok(StudySessionPublic.model_validate(session))

    def delete_study_session(self, session_id: int) -> OperationResult:
        session = self._get_owned(StudySession, session_id)
        if not session:
            logger.warning(f"Session not found for delete: session_id={session_id}, owner={self.owner_id}")
            return OperationResult.fail(ErrorKind.NOT_FOUND, "Session not found")
        self.db.delete(session)
        failure = self._commit("delete study session")
        if failure:
            return failure
        logger.info(f"StudySession deleted: {session_id}")
        self.refresh()
        return OperationResult.ok()

    def record_pomodoro(self, minutes: int, when: datetime | None = None) -> OperationResult:
        """Store a finished work interval as a subject-less pomodoro session."""
        return self.add_study_session(
            StudySessionCreate(
                date=when or datetime.now(),
                duration=coerce_minutes(minutes),
                type=SessionType.POMODORO,
            )
        )

    # ------------------------------------------------------------------
    # Todos
    # ------------------------------------------------------------------

    def add_todo(self, data: TodoCreate) -> OperationResult:
        if _blank(data.text):
            return OperationResult.fail(ErrorKind.VALIDATION, "Todo text is required")
        todo = Todo(owner_id=self.owner_id, text=data.text.strip(), completed=False)
        self.db.add(todo)
        failure = self._commit("create todo")
        if failure:
            return failure
        self.db.refresh(todo)
        logger.info(f"Todo added: {todo.id}")
        self.refresh()
        return OperationResult.ok(TodoPublic.model_validate(todo))

    def update_todo(self, todo_id: int, data: TodoUpdate) -> OperationResult:
        todo = self._get_owned(Todo, todo_id)
        if not todo:
            return OperationResult.fail(ErrorKind.NOT_FOUND, "Todo not found")
        changes = data.dict(exclude_unset=True)
        if "text" in changes:
            if _blank(changes["text"]):
                return OperationResult.fail(ErrorKind.VALIDATION, "Todo text is required")
            todo.text = changes["text"].strip()
        if changes.get("completed") is not None:
            todo.completed = changes["completed"]
        self.db.add(todo)
        failure = self._commit("update todo")
        if failure:
            return failure
        self.db.refresh(todo)
        self.refresh()
        return OperationResult.ok(TodoPublic.model_validate(todo))

    def delete_todo(self, todo_id: int) -> OperationResult:
        todo = self._get_owned(Todo, todo_id)
        if not todo:
            return OperationResult.fail(ErrorKind.NOT_FOUND, "Todo not found")
        self.db.delete(todo)
        failure = self._commit("delete todo")
        if failure:
            return failure
        self.refresh()
        return OperationResult.ok()
