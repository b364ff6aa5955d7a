"""Attempt schemas."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    ALREADY_SUBMITTED = "already_submitted"


class AttemptCreate(BaseModel):
    """Attempt handed to the storage collaborator (id/timestamp assigned there)."""

    user_id: uuid.UUID
    quiz_id: uuid.UUID
    content_item_id: uuid.UUID
    score: int
    total_questions: int
    time_spent: int
    completed_at: datetime
    submission_id: uuid.UUID | None = None


class AttemptRead(AttemptCreate):
    """Persisted attempt."""

    id: uuid.UUID

    @property
    def is_perfect(self) -> bool:
        return self.total_questions > 0 and self.score == self.total_questions

    model_config = {"from_attributes": True}


class AttemptSubmit(BaseModel):
    """POST /api/attempts — a finished quiz session from the reader's runtime."""

    content_item_id: uuid.UUID
    submission_id: uuid.UUID
    started_at: datetime
    selections: list[int]  # option index per question, -1 = unanswered


class QuestionReview(BaseModel):
    """Per-question feedback returned once results are shown."""

    index: int
    selected: int
    correct_answer: int
    is_correct: bool
    explanation: str | None = None


class AttemptResult(BaseModel):
    """Outcome of a submission."""

    status: SubmissionStatus
    attempt: AttemptRead | None = None
    rank: int | None = None
    badges_granted: list[str] = []
    review: list[QuestionReview] = []
