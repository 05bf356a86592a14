"""Per-user state container.

Collections are replaced wholesale on every publish and never mutated in
place. Derived views are recomputed from the latest snapshot; the timeline
and the subject totals are cached until the collections they read change.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Callable, Iterable, Sequence

from studyplanner.schemas.session import StudySessionPublic
from studyplanner.schemas.subject import SubjectPublic
from studyplanner.schemas.todo import TodoPublic
from studyplanner.services import statistics
from studyplanner.services.calendar_grid import CalendarGrid, CalendarView, build_grid
from studyplanner.services.timeline import Activity, merge_timeline

logger = logging.getLogger(__name__)

Listener = Callable[["PlannerStore"], Any]


class PlannerStore:
    def __init__(self) -> None:
        self._subjects: tuple[SubjectPublic, ...] = ()
        self._sessions: tuple[StudySessionPublic, ...] = ()
        self._todos: tuple[TodoPublic, ...] = ()
        self._listeners: list[Listener] = []
        self._timeline_key: tuple | None = None
        self._timeline: list[Activity] = []
        self._totals_key: tuple | None = None
        self._totals: list[statistics.SubjectTotal] = []

    @property
    def subjects(self) -> tuple[SubjectPublic, ...]:
        return self._subjects

    @property
    def sessions(self) -> tuple[StudySessionPublic, ...]:
        return self._sessions

    @property
    def todos(self) -> tuple[TodoPublic, ...]:
        return self._todos

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(
        self,
        subjects: Iterable[SubjectPublic] | None = None,
        sessions: Iterable[StudySessionPublic] | None = None,
        todos: Iterable[TodoPublic] | None = None,
    ) -> bool:
        """Replace the given collections. Listeners only hear about real changes."""
        changed = False
        if subjects is not None:
            subjects = tuple(subjects)
            if subjects != self._subjects:
                self._subjects = subjects
                changed = True
        if sessions is not None:
            sessions = tuple(sessions)
            if sessions != self._sessions:
                self._sessions = sessions
                changed = True
        if todos is not None:
            todos = tuple(todos)
            if todos != self._todos:
                self._todos = todos
                changed = True
        if changed:
            self._notify()
        return changed

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener failed")

    def _is_current(self, key: tuple | None) -> bool:
        # publish() keeps the old tuple when nothing changed, so identity is enough
        return key is not None and key[0] is self._subjects and key[1] is self._sessions

    def timeline(self) -> list[Activity]:
        key = (self._subjects, self._sessions)
        if not self._is_current(self._timeline_key):
            self._timeline = merge_timeline(self._subjects, self._sessions)
            self._timeline_key = key
        return self._timeline

    def calendar(
        self,
        reference: date | datetime,
        view: CalendarView,
        today: date | datetime | None = None,
    ) -> CalendarGrid:
        return build_grid(self.timeline(), reference, view, today=today)

    def subject_totals(self) -> list[statistics.SubjectTotal]:
        key = (self._subjects, self._sessions)
        if not self._is_current(self._totals_key):
            self._totals = statistics.subject_totals(self._subjects, self._sessions)
            self._totals_key = key
        return self._totals

    def cumulative_series(
        self,
        start_date: str,
        end_date: str,
        subject_ids: Sequence[int] | None = None,
        max_days: int | None = None,
    ) -> list[dict[str, int | str]]:
        return statistics.cumulative_series(
            self._sessions,
            start_date,
            end_date,
            subject_ids=subject_ids,
            all_subject_ids=[subject.id for subject in self._subjects],
            max_days=max_days,
        )

    def summary(self, today: date | datetime | None = None) -> statistics.StudySummary:
        return statistics.study_summary(self._sessions, today=today)


class StoreRegistry:
    """Per-user stores, least recently used dropped past max_entries.

    A store only caches what PlannerService.refresh() re-reads from the
    database, so a dropped store is rebuilt on the owner's next request.
    """

    def __init__(self, max_entries: int = 1024) -> None:
        self.max_entries = max_entries
        self._stores: OrderedDict[str, PlannerStore] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._stores)

    def get(self, owner_id: str) -> PlannerStore:
        with self._lock:
            store = self._stores.get(owner_id)
            if store is not None:
                self._stores.move_to_end(owner_id)
                return store
            store = PlannerStore()
            self._stores[owner_id] = store
            while len(self._stores) > self.max_entries:
                self._stores.popitem(last=False)
            return store
