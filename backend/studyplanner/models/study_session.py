from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from studyplanner.db.base import Base


class SessionType(str, PyEnum):
    STUDY = "study"
    POMODORO = "pomodoro"
    EXAM = "exam"
    ASSIGNMENT = "assignment"
    CLASS = "class"
    OTHER = "other"


class StudySession(Base):
    __tablename__ = "study_sessions"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(128), nullable=False, index=True)
    subject_id = Column(
        Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    date = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False, default=0)  # minutes
    type = Column(SQLEnum(SessionType), nullable=False, default=SessionType.STUDY)
    description = Column(String(255), nullable=True)
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_time = Column(String(5), nullable=True)  # HH:MM
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    subject = relationship("Subject", back_populates="sessions")
