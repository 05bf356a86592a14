from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studyplanner.db.base import Base


class ImportantDateType(str, PyEnum):
    EXAMEN = "examen"
    ENTREGA = "entrega"
    CLASE = "clase"
    OTRO = "otro"


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    professor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    color: Mapped[str] = mapped_column(String(32), nullable=False, default="#6366F1")
    # Embedded list of {"type", "date", "description"} dicts, kept in input order
    important_dates: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    sessions = relationship("StudySession", back_populates="subject", passive_deletes=True)
