from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )
    database_url: str = Field(default="sqlite:///./studyplanner.db")
    log_level: str = Field(default="INFO")

    # Identity tokens are issued by the external auth provider
    auth_secret_key: str = Field(default="development-secret")
    auth_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24)

    default_subject_color: str = Field(default="#6366F1")

    pomodoro_work_minutes: int = Field(default=25, ge=1)
    pomodoro_short_break_minutes: int = Field(default=5, ge=1)
    pomodoro_long_break_minutes: int = Field(default=15, ge=1)
    pomodoro_intervals_before_long_break: int = Field(default=4, ge=1)
    pomodoro_tick_seconds: float = Field(default=1.0, gt=0)

    # Longest span /analytics/cumulative will build, in days
    analytics_max_range_days: int = Field(default=3660, ge=1)

    # Owners whose store and pomodoro timer are kept in memory
    registry_max_owners: int = Field(default=1024, ge=1)

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
