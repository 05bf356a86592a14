from pydantic import BaseModel

from studyplanner.services.calendar_grid import CalendarCell, CalendarGrid, CalendarView
from studyplanner.services.time_utils import format_iso_date
from studyplanner.services.timeline import Activity, activity_to_dict


class ActivityPublic(BaseModel):
    kind: str  # "session" or "event"
    id: int | str
    subject_id: int | None
    subject_name: str | None
    date: str
    type: str
    label: str
    duration: int | None = None
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityPublic":
        return cls(**activity_to_dict(activity))


class CalendarCellPublic(BaseModel):
    date: str | None
    is_today: bool
    sessions: list[ActivityPublic]
    events: list[ActivityPublic]

    @classmethod
    def from_cell(cls, cell: CalendarCell) -> "CalendarCellPublic":
        return cls(
            date=format_iso_date(cell.date) if cell.date else None,
            is_today=cell.is_today,
            sessions=[ActivityPublic.from_activity(item) for item in cell.session_like],
            events=[ActivityPublic.from_activity(item) for item in cell.event_like],
        )


class CalendarGridPublic(BaseModel):
    view: CalendarView
    reference: str
    title: str
    previous: str | None
    next: str | None
    cells: list[CalendarCellPublic]

    @classmethod
    def from_grid(cls, grid: CalendarGrid) -> "CalendarGridPublic":
        return cls(
            view=grid.view,
            reference=format_iso_date(grid.reference),
            title=grid.title,
            previous=format_iso_date(grid.previous) if grid.previous else None,
            next=format_iso_date(grid.next) if grid.next else None,
            cells=[CalendarCellPublic.from_cell(cell) for cell in grid.cells],
        )
