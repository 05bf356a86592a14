from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from studyplanner.api import deps
from studyplanner.schemas.calendar import ActivityPublic, CalendarGridPublic
from studyplanner.services.calendar_grid import CalendarView, navigate
from studyplanner.services.planner import PlannerService
from studyplanner.services.time_utils import normalize, parse_iso_date

router = APIRouter()


def _parse_reference(value: str | None) -> datetime:
    if value is None:
        return normalize(datetime.now())
    try:
        return parse_iso_date(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date '{value}', expected YYYY-MM-DD",
        ) from exc


@router.get("/timeline", response_model=list[ActivityPublic])
def get_timeline(
    planner: PlannerService = Depends(deps.get_planner),
) -> list[ActivityPublic]:
    """Study sessions and subject important dates as one list."""
    return [ActivityPublic.from_activity(activity) for activity in planner.refresh().timeline()]


@router.get("/{view}", response_model=CalendarGridPublic)
def get_calendar(
    view: CalendarView,
    reference: str | None = Query(default=None, alias="date"),
    offset: int = 0,
    planner: PlannerService = Depends(deps.get_planner),
) -> CalendarGridPublic:
    """
    Calendar cells for a daily, weekly or monthly view.

    - date: reference day (YYYY-MM-DD, defaults to today)
    - offset: number of views to move from the reference (e.g. -1 = previous month)
    """
    reference_day = _parse_reference(reference)
    if offset:
        reference_day = navigate(reference_day, view, offset)
        if reference_day is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Offset moves past the supported calendar (years 1-9999)",
            )
    grid = planner.refresh().calendar(reference_day, view)
    return CalendarGridPublic.from_grid(grid)
