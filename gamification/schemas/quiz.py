"""Quiz schemas.

``Question`` and ``Quiz`` double as the immutable domain values handed to
the session state machine; ``QuizRead`` is what a reader sees before
answering (no correct answers, no explanations).
"""

import uuid

from pydantic import BaseModel, Field, model_validator

from gamification.config import settings


class Question(BaseModel):
    """One multiple-choice question.

    Accepts the hosted backend's ``questions_json`` keys (``correctAnswer``)
    as well as the snake_case field names.
    """

    question: str
    options: list[str] = Field(min_length=2)
    correct_answer: int = Field(alias="correctAnswer")
    explanation: str | None = None
    points: int = 1

    model_config = {"frozen": True, "populate_by_name": True}

    @model_validator(mode="after")
    def _check_options(self) -> "Question":
        if len(self.options) > settings.MAX_OPTIONS_PER_QUESTION:
            raise ValueError(
                f"at most {settings.MAX_OPTIONS_PER_QUESTION} options allowed, "
                f"got {len(self.options)}"
            )
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(
                f"correct_answer {self.correct_answer} outside options "
                f"[0, {len(self.options) - 1}]"
            )
        return self


class Quiz(BaseModel):
    """A quiz attached to a content item. Immutable once loaded."""

    id: uuid.UUID
    content_item_id: uuid.UUID
    title: str
    questions: list[Question] = Field(min_length=1)

    model_config = {"frozen": True}

    @property
    def total_questions(self) -> int:
        return len(self.questions)


class QuestionRead(BaseModel):
    """Question as shown while the quiz is being taken."""

    index: int
    question: str
    options: list[str]


class QuizRead(BaseModel):
    """GET /api/quizzes/{content_item_id}."""

    id: uuid.UUID
    content_item_id: uuid.UUID
    title: str
    total_questions: int
    questions: list[QuestionRead]

    @classmethod
    def from_quiz(cls, quiz: Quiz) -> "QuizRead":
        return cls(
            id=quiz.id,
            content_item_id=quiz.content_item_id,
            title=quiz.title,
            total_questions=quiz.total_questions,
            questions=[
                QuestionRead(index=i, question=q.question, options=q.options)
                for i, q in enumerate(quiz.questions)
            ],
        )
