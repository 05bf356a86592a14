import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi import Request

from studyplanner.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Always use the correct connect_args for SQLite
is_sqlite = settings.database_url.startswith("sqlite")
connect_args = {"check_same_thread": False} if is_sqlite else {}
logger.debug(f"Database connection: {'SQLite' if is_sqlite else 'PostgreSQL'}")
engine = create_engine(
    settings.database_url,
    connect_args=connect_args
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def get_db(request: Request):
    # The app may be built with its own session factory (tests, scripts)
    factory = getattr(request.app.state, "session_factory", None) or SessionLocal
    db = factory()
    try:
        yield db
    finally:
        db.close()
