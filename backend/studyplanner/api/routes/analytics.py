from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from studyplanner.api import deps
from studyplanner.core.config import get_settings
from studyplanner.schemas.analytics import StudySummaryPublic, SubjectTotalPublic
from studyplanner.services.planner import PlannerService
from studyplanner.services.time_utils import add_days, format_iso_date, parse_iso_date

router = APIRouter()

DEFAULT_RANGE_DAYS = 30


@router.get("/subjects", response_model=list[SubjectTotalPublic])
def get_subject_totals(
    planner: PlannerService = Depends(deps.get_planner),
) -> list[SubjectTotalPublic]:
    """Study minutes per subject with a breakdown by session type, largest first."""
    return [
        SubjectTotalPublic.model_validate(total)
        for total in planner.refresh().subject_totals()
    ]


@router.get("/cumulative", response_model=list[dict[str, int | str]])
def get_cumulative_series(
    start_date: str | None = None,
    end_date: str | None = None,
    subject_ids: list[int] = Query(default=[]),
    planner: PlannerService = Depends(deps.get_planner),
) -> list[dict[str, int | str]]:
    """
    Cumulative study minutes, one row per day.

    - start_date / end_date: inclusive YYYY-MM-DD range (defaults to the last 30 days)
    - subject_ids: subjects to chart separately; empty means one combined total
    """
    try:
        if end_date is None:
            end_date = format_iso_date(datetime.now())
        if start_date is None:
            start = add_days(parse_iso_date(end_date), -(DEFAULT_RANGE_DAYS - 1))
            start_date = format_iso_date(start)
        parse_iso_date(start_date)
        parse_iso_date(end_date)
    except (ValueError, OverflowError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Dates must use the YYYY-MM-DD format",
        ) from exc

    store = planner.refresh()
    try:
        return store.cumulative_series(
            start_date,
            end_date,
            subject_ids=subject_ids,
            max_days=get_settings().analytics_max_range_days,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/summary", response_model=StudySummaryPublic)
def get_summary(
    planner: PlannerService = Depends(deps.get_planner),
) -> StudySummaryPublic:
    return StudySummaryPublic.model_validate(planner.refresh().summary())
