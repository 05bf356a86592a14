from datetime import datetime

from pydantic import BaseModel


class TodoCreate(BaseModel):
    text: str = ""


class TodoUpdate(BaseModel):
    text: str | None = None
    completed: bool | None = None


class TodoPublic(BaseModel):
    id: int
    text: str
    completed: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True
        frozen = True
