from pydantic import BaseModel, Field

from studyplanner.services.pomodoro import PomodoroPhase


class PomodoroConfigPublic(BaseModel):
    work_minutes: int
    short_break_minutes: int
    long_break_minutes: int
    intervals_before_long_break: int


class PomodoroConfigUpdate(BaseModel):
    work_minutes: int | None = Field(default=None, ge=1)
    short_break_minutes: int | None = Field(default=None, ge=1)
    long_break_minutes: int | None = Field(default=None, ge=1)
    intervals_before_long_break: int | None = Field(default=None, ge=1)


class PomodoroState(BaseModel):
    phase: PomodoroPhase
    running: bool
    remaining_seconds: int
    display: str  # mm:ss
    completed_intervals: int
    config: PomodoroConfigPublic
    message: str | None = None
