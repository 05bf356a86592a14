import datetime as dt
from datetime import datetime

from pydantic import BaseModel, Field

from studyplanner.models.subject import ImportantDateType


class ImportantDate(BaseModel):
    type: ImportantDateType = ImportantDateType.OTRO
    date: dt.date
    description: str = ""

    class Config:
        frozen = True


class SubjectBase(BaseModel):
    name: str = ""
    professor: str | None = None
    color: str | None = None
    important_dates: list[ImportantDate] = Field(default_factory=list)


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    name: str | None = None
    professor: str | None = None
    color: str | None = None
    important_dates: list[ImportantDate] | None = None


class SubjectPublic(BaseModel):
    id: int
    name: str
    professor: str | None = None
    color: str
    important_dates: list[ImportantDate] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
        frozen = True
