import datetime as dt
from datetime import datetime

from pydantic import BaseModel

from studyplanner.models.study_session import SessionType


class StudySessionCreate(BaseModel):
    subject_id: int | None = None
    date: dt.datetime | dt.date | None = None
    # Lenient on purpose: anything non-numeric ends up as 0 minutes
    duration: int | float | str | None = None
    type: SessionType = SessionType.STUDY
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None


class StudySessionUpdate(BaseModel):
    subject_id: int | None = None
    date: dt.datetime | dt.date | None = None
    duration: int | float | str | None = None
    type: SessionType | None = None
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None


class StudySessionPublic(BaseModel):
    id: int
    subject_id: int | None
    date: datetime
    duration: int
    type: SessionType
    description: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
        frozen = True
