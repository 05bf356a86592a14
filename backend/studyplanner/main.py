import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from studyplanner.api.routes import api_router
from studyplanner.core.config import get_settings
from studyplanner.db.session import SessionLocal
from studyplanner.services.planner import PlannerService
from studyplanner.services.pomodoro import (
    AsyncioTicker,
    PomodoroConfig,
    PomodoroRegistry,
    offload_to_thread,
)
from studyplanner.services.store import StoreRegistry

logger = logging.getLogger(__name__)


def _pomodoro_config() -> PomodoroConfig:
    settings = get_settings()
    return PomodoroConfig(
        work_minutes=settings.pomodoro_work_minutes,
        short_break_minutes=settings.pomodoro_short_break_minutes,
        long_break_minutes=settings.pomodoro_long_break_minutes,
        intervals_before_long_break=settings.pomodoro_intervals_before_long_break,
    )


def _session_recorder(app: FastAPI):
    """Persist finished work intervals through the planner service.

    The recorder runs on a worker thread with its own database session.
    """

    def factory(owner_id: str):
        def record(minutes: int):
            db = app.state.session_factory()
            try:
                planner = PlannerService(db, owner_id, app.state.stores.get(owner_id))
                return planner.record_pomodoro(minutes)
            finally:
                db.close()

        return record

    return factory


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # No countdown may outlive the application
    app.state.pomodoros.close_all()
    logger.info("Pomodoro timers stopped")


def create_app(session_factory: sessionmaker | None = None) -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="Study Planner",
        docs_url="/docs" if settings.environment == "development" else None,
        redoc_url="/redoc" if settings.environment == "development" else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.session_factory = session_factory or SessionLocal
    app.state.stores = StoreRegistry(max_entries=settings.registry_max_owners)
    app.state.pomodoros = PomodoroRegistry(
        config_factory=_pomodoro_config,
        record_factory=_session_recorder(app),
        ticker_factory=lambda: AsyncioTicker(settings.pomodoro_tick_seconds),
        offload=offload_to_thread,
        max_entries=settings.registry_max_owners,
    )

    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("studyplanner.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
