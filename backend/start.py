"""Startup script for production deployment.

On a fresh database (no tables), creates all tables from models and stamps
Alembic to head. On an existing database, runs Alembic migrations normally.
Then serves the API with uvicorn.
"""

import subprocess
import sys

from sqlalchemy import inspect

from studyplanner.db.session import engine
from studyplanner.db.base import Base
from studyplanner.main import run
from studyplanner.models import StudySession, Subject, Todo  # noqa: F401


def main():
    inspector = inspect(engine)
    tables = inspector.get_table_names()

    if "subjects" not in tables:
        print("Fresh database detected, creating all tables...")
        Base.metadata.create_all(bind=engine)
        print("Tables created. Stamping Alembic to head...")
        subprocess.check_call([sys.executable, "-m", "alembic", "stamp", "head"])
        print("Done.")
    else:
        print("Existing database, running migrations...")
        subprocess.check_call([sys.executable, "-m", "alembic", "upgrade", "head"])
        print("Migrations complete.")

    run()


if __name__ == "__main__":
    main()
