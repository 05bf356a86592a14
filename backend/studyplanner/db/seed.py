import sys
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from studyplanner.db.session import SessionLocal
from studyplanner.models.study_session import SessionType, StudySession
from studyplanner.models.subject import ImportantDateType, Subject
from studyplanner.models.todo import Todo
from studyplanner.services.durations import resolve_duration

DEMO_OWNER = "demo-student"


def seed_demo_data(db: Session, owner_id: str = DEMO_OWNER) -> None:
    existing = db.query(Subject).filter(Subject.owner_id == owner_id).first()
    if existing:
        return

    today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    subjects = [
        Subject(
            owner_id=owner_id,
            name="Cálculo II",
            professor="Dra. Pérez",
            color="#0EA5E9",
            important_dates=[
                {
                    "type": ImportantDateType.EXAMEN.value,
                    "date": (today + timedelta(days=10)).date().isoformat(),
                    "description": "Parcial 2",
                },
                {
                    "type": ImportantDateType.ENTREGA.value,
                    "date": (today + timedelta(days=3)).date().isoformat(),
                    "description": "Guía de integrales",
                },
            ],
        ),
        Subject(
            owner_id=owner_id,
            name="Literatura Moderna",
            color="#F97316",
            important_dates=[
                {
                    "type": ImportantDateType.CLASE.value,
                    "date": (today + timedelta(days=1)).date().isoformat(),
                    "description": "Clase de repaso",
                },
            ],
        ),
        Subject(
            owner_id=owner_id,
            name="Laboratorio de Física",
            professor="Prof. Gómez",
            color="#10B981",
        ),
    ]
    db.add_all(subjects)
    db.flush()

    sessions: list[StudySession] = []
    for day_offset in range(-6, 1):
        day = today + timedelta(days=day_offset)
        sessions.extend(
            [
                StudySession(
                    owner_id=owner_id,
                    subject_id=subjects[0].id,
                    date=day + timedelta(hours=9),
                    duration=resolve_duration(start_time="09:00", end_time="10:15"),
                    type=SessionType.STUDY,
                    start_time="09:00",
                    end_time="10:15",
                ),
                StudySession(
                    owner_id=owner_id,
                    subject_id=subjects[1].id if day_offset % 2 else subjects[2].id,
                    date=day + timedelta(hours=18),
                    duration=45,
                    type=SessionType.STUDY if day_offset % 2 else SessionType.CLASS,
                ),
                StudySession(
                    owner_id=owner_id,
                    subject_id=None,
                    date=day + timedelta(hours=20),
                    duration=25,
                    type=SessionType.POMODORO,
                ),
            ]
        )
    db.add_all(sessions)

    db.add_all(
        [
            Todo(owner_id=owner_id, text="Imprimir apuntes de Cálculo"),
            Todo(owner_id=owner_id, text="Reservar sala de estudio", completed=True),
        ]
    )
    db.commit()


if __name__ == "__main__":
    with SessionLocal() as session:
        seed_demo_data(session, sys.argv[1] if len(sys.argv) > 1 else DEMO_OWNER)
