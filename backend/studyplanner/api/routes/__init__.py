from fastapi import APIRouter

from studyplanner.api.routes import (
    analytics,
    calendar,
    pomodoro,
    sessions,
    subjects,
    todos,
)


api_router = APIRouter()
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(todos.router, prefix="/todos", tags=["todos"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(pomodoro.router, prefix="/pomodoro", tags=["pomodoro"])
