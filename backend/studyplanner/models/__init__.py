from studyplanner.models.subject import Subject
from studyplanner.models.study_session import StudySession
from studyplanner.models.todo import Todo

__all__ = [
    "Subject",
    "StudySession",
    "Todo",
]
