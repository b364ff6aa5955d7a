"""SQLAlchemy engine, session factory and declarative base for the gamification store."""

from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from gamification.config import settings

# Built on first use so importing models or the API never opens a connection
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Engine for ``settings.DATABASE_URL``, created once per process."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Session factory shared by request handlers and Celery tasks."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autocommit=False, autoflush=False)
    return _session_factory


class Base(DeclarativeBase):
    """Declarative base for quizzes, attempts, leaderboard, badges and notifications."""


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request, closed afterwards.

    ``SqlStore`` commits or rolls back each write itself.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
