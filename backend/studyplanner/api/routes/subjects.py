from fastapi import APIRouter, Depends, status

from studyplanner.api import deps
from studyplanner.schemas.subject import SubjectCreate, SubjectPublic, SubjectUpdate
from studyplanner.services.planner import PlannerService

router = APIRouter()


@router.get("/", response_model=list[SubjectPublic])
def list_subjects(
    planner: PlannerService = Depends(deps.get_planner),
) -> list[SubjectPublic]:
    return list(planner.refresh().subjects)


@router.post("/", response_model=SubjectPublic, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    planner: PlannerService = Depends(deps.get_planner),
) -> SubjectPublic:
    return deps.unwrap(planner.add_subject(payload))


@router.put("/{subject_id}", response_model=SubjectPublic)
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    planner: PlannerService = Depends(deps.get_planner),
) -> SubjectPublic:
    return deps.unwrap(planner.update_subject(subject_id, payload))


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(
    subject_id: int,
    planner: PlannerService = Depends(deps.get_planner),
) -> None:
    """Delete the subject together with all of its study sessions."""
    deps.unwrap(planner.delete_subject(subject_id))
