from fastapi import APIRouter, Depends, status

from studyplanner.api import deps
from studyplanner.schemas.todo import TodoCreate, TodoPublic, TodoUpdate
from studyplanner.services.planner import PlannerService

router = APIRouter()


@router.get("/", response_model=list[TodoPublic])
def list_todos(
    planner: PlannerService = Depends(deps.get_planner),
) -> list[TodoPublic]:
    return list(planner.refresh().todos)


@router.post("/", response_model=TodoPublic, status_code=status.HTTP_201_CREATED)
def create_todo(
    payload: TodoCreate,
    planner: PlannerService = Depends(deps.get_planner),
) -> TodoPublic:
    return deps.unwrap(planner.add_todo(payload))


@router.patch("/{todo_id}", response_model=TodoPublic)
def update_todo(
    todo_id: int,
    payload: TodoUpdate,
    planner: PlannerService = Depends(deps.get_planner),
) -> TodoPublic:
    return deps.unwrap(planner.update_todo(todo_id, payload))


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: int,
    planner: PlannerService = Depends(deps.get_planner),
) -> None:
    deps.unwrap(planner.delete_todo(todo_id))
