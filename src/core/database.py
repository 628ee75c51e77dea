from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from ..config import get_settings

settings = get_settings()


def engine_options(database_url: str) -> Dict[str, Any]:
    # SQLite connections are shared between the request threadpool and background tasks
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }


engine = create_engine(settings.database_url, echo=settings.debug, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for work that runs outside a request (scheduler, chat bot)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    # Register the daily_images table with Base
    from ..models import daily_image  # noqa: F401
    Base.metadata.create_all(bind=engine)
