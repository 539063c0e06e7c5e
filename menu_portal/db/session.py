"""Database engine and request-scoped sessions."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from menu_portal.core.config import settings


def build_engine(database_url: str, **kwargs: Any) -> Engine:
    """Create an engine; SQLite connections are shared with the threadpool."""
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(database_url, **kwargs)


engine: Engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """One session per request, closed after the response is sent."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
