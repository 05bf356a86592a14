import logging

from fastapi import APIRouter, Depends, HTTPException, status

from studyplanner.api import deps
from studyplanner.schemas.pomodoro import PomodoroConfigUpdate, PomodoroState
from studyplanner.services.pomodoro import PomodoroBusyError, PomodoroScheduler

logger = logging.getLogger(__name__)

router = APIRouter()

# These handlers are async so the countdown ticker lives on the server's event loop


@router.get("/", response_model=PomodoroState)
async def get_state(
    scheduler: PomodoroScheduler = Depends(deps.get_pomodoro),
) -> PomodoroState:
    return PomodoroState(**scheduler.snapshot())


@router.post("/toggle", response_model=PomodoroState)
async def toggle_timer(
    scheduler: PomodoroScheduler = Depends(deps.get_pomodoro),
) -> PomodoroState:
    scheduler.toggle()
    return PomodoroState(**scheduler.snapshot())


@router.post("/start", response_model=PomodoroState)
async def start_timer(
    scheduler: PomodoroScheduler = Depends(deps.get_pomodoro),
) -> PomodoroState:
    scheduler.start()
    return PomodoroState(**scheduler.snapshot())


@router.post("/pause", response_model=PomodoroState)
async def pause_timer(
    scheduler: PomodoroScheduler = Depends(deps.get_pomodoro),
) -> PomodoroState:
    scheduler.pause()
    return PomodoroState(**scheduler.snapshot())


@router.post("/reset", response_model=PomodoroState)
async def reset_timer(
    scheduler: PomodoroScheduler = Depends(deps.get_pomodoro),
) -> PomodoroState:
    scheduler.reset()
    return PomodoroState(**scheduler.snapshot())


@router.put("/config", response_model=PomodoroState)
async def update_config(
    payload: PomodoroConfigUpdate,
    scheduler: PomodoroScheduler = Depends(deps.get_pomodoro),
) -> PomodoroState:
    try:
        scheduler.configure(**payload.dict(exclude_unset=True))
    except PomodoroBusyError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info(f"Pomodoro configured: {scheduler.config}")
    return PomodoroState(**scheduler.snapshot())
