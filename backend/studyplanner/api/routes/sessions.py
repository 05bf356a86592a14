from fastapi import APIRouter, Depends, status

from studyplanner.api import deps
from studyplanner.schemas.session import (
    StudySessionCreate,
    StudySessionPublic,
    StudySessionUpdate,
)
from studyplanner.services.planner import PlannerService

router = APIRouter()


@router.get("/", response_model=list[StudySessionPublic])
def list_sessions(
    subject_id: int | None = None,
    planner: PlannerService = Depends(deps.get_planner),
) -> list[StudySessionPublic]:
    sessions = planner.refresh().sessions
    if subject_id is not None:
        return [session for session in sessions if session.subject_id == subject_id]
    return list(sessions)


@router.post("/", response_model=StudySessionPublic, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: StudySessionCreate,
    planner: PlannerService = Depends(deps.get_planner),
) -> StudySessionPublic:
    """
    Record a study session or event.

    - duration is taken from start_time/end_time (HH:MM) when both are given,
      overnight spans included; otherwise from the duration field
    """
    return deps.unwrap(planner.add_study_session(payload))


@router.put("/{session_id}", response_model=StudySessionPublic)
def update_session(
    session_id: int,
    payload: StudySessionUpdate,
    planner: PlannerService = Depends(deps.get_planner),
) -> StudySessionPublic:
    return deps.unwrap(planner.update_study_session(session_id, payload))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(
    session_id: int,
    planner: PlannerService = Depends(deps.get_planner),
) -> None:
    deps.unwrap(planner.delete_study_session(session_id))
