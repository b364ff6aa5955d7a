"""Shared pytest fixtures for gamification tests."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gamification.core.security import SERVICE_ROLE, create_access_token
from gamification.db import models
from gamification.db.session import Base, get_db
from gamification.main import app
from gamification.schemas.quiz import Quiz
from gamification.services.store import SqlStore


# Use an in-memory SQLite database for testing with static pool
SQLALCHEMY_TEST_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # Use StaticPool to keep connection alive
    echo=False,
)
TestSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

# Create all tables once at startup
Base.metadata.create_all(bind=engine)

QUESTIONS = [
    {
        "question": "Which planet is known as the Red Planet?",
        "options": ["Venus", "Mars", "Jupiter", "Mercury"],
        "correctAnswer": 1,
        "explanation": "Iron oxide dust.",
    },
    {
        "question": "What is 2 + 2?",
        "options": ["3", "4", "5"],
        "correctAnswer": 1,
    },
    {
        "question": "Who wrote 'Pride and Prejudice'?",
        "options": ["Brontë", "Shelley", "Austen", "Eliot"],
        "correctAnswer": 2,
    },
]
CORRECT = [1, 1, 2]


class FakeClock:
    """Deterministic clock for session timing."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def mock_celery_tasks():
    """Mock Celery tasks for all tests to prevent Redis connection."""
    mock_task = MagicMock(return_value=MagicMock(id="fake-task-id"))
    mock_task.delay = MagicMock(return_value=MagicMock(id="fake-task-id"))

    # Patch at the import point in the events module
    with patch("gamification.api.events.evaluate_achievements", mock_task):
        yield mock_task


@pytest.fixture(scope="function")
def db():
    """Get a fresh DB session for each test."""
    session = TestSession()
    try:
        yield session
    finally:
        session.rollback()
        # SqlStore commits, so rollback alone does not clean up
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


@pytest.fixture
def store(db: Session) -> SqlStore:
    return SqlStore(db)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def quiz() -> Quiz:
    return Quiz.model_validate(
        {
            "id": uuid.uuid4(),
            "content_item_id": uuid.uuid4(),
            "title": "General knowledge",
            "questions": QUESTIONS,
        }
    )


@pytest.fixture
def seeded_quiz(db: Session) -> models.Quiz:
    """A quiz row attached to a fresh content item."""
    row = models.Quiz(
        content_item_id=uuid.uuid4(),
        title="General knowledge",
        questions_json=QUESTIONS,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture(scope="function")
def client(db: Session):
    """FastAPI test client with overridden DB dependency."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Remove TrustedHostMiddleware for tests to allow 'testserver' host
    app.user_middleware = [m for m in app.user_middleware if "TrustedHost" not in str(m)]

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(user_id: uuid.UUID | None = None, role: str = "authenticated") -> str:
    return create_access_token({"sub": str(user_id or uuid.uuid4()), "role": role})


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def auth_headers(user_id: uuid.UUID) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def service_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(role=SERVICE_ROLE)}"}
