from pydantic import BaseModel


class SubjectTotalPublic(BaseModel):
    subject_id: int
    name: str
    color: str
    total_minutes: int
    breakdown: dict[str, int]  # "Estudio", "Exam", ... -> minutes

    class Config:
        from_attributes = True


class StudySummaryPublic(BaseModel):
    total_minutes: int
    session_count: int
    week_minutes: int
    today_minutes: int

    class Config:
        from_attributes = True
