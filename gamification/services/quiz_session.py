"""Quiz-taking session state machine.

States: NOT_STARTED → IN_PROGRESS → COMPLETED. While in progress a cursor
walks the questions; it is not a separate top-level state.

The machine is single-threaded and cooperative: every transition runs on the
caller's thread and none of them blocks. Invalid transitions and out-of-range
indices are logged no-ops that return ``False`` so a misbehaving caller can
never corrupt or crash the session.

Score is never stored: it is recomputed from the selections on demand.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import Callable, Sequence

from gamification.schemas.attempt import AttemptRead, QuestionReview
from gamification.schemas.quiz import Question, Quiz

logger = logging.getLogger(__name__)

UNANSWERED = -1

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def compute_score(questions: Sequence[Question], selections: Sequence[int]) -> int:
    """Count selections matching the correct option. Unanswered (-1) never matches."""
    return sum(
        1
        for question, selected in zip(questions, selections)
        if selected == question.correct_answer
    )


class QuizSession:
    """One user's attempt at one quiz."""

    def __init__(self, quiz: Quiz, clock: Clock = _utcnow) -> None:
        self.quiz = quiz
        self._clock = clock
        self._reset_state()

    def _reset_state(self) -> None:
        self.state = SessionState.NOT_STARTED
        self.current_index = 0
        self.selections: list[int] = [UNANSWERED] * self.quiz.total_questions
        self.started_at: datetime | None = None
        self.completed_at: datetime | None = None
        self.time_spent: int | None = None
        self.results_shown = False
        self.submitted = False
        self.attempt: AttemptRead | None = None

    # ── derived state ─────────────────────────────────────────────────────

    @property
    def total_questions(self) -> int:
        return self.quiz.total_questions

    @property
    def score(self) -> int:
        return compute_score(self.quiz.questions, self.selections)

    @property
    def is_perfect(self) -> bool:
        return self.score == self.total_questions

    @property
    def completed(self) -> bool:
        return self.state is SessionState.COMPLETED

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total_questions - 1

    @property
    def answered_count(self) -> int:
        return sum(1 for s in self.selections if s != UNANSWERED)

    @property
    def can_advance(self) -> bool:
        """Forward progress requires an answer on the current question."""
        return (
            self.state is SessionState.IN_PROGRESS
            and self.selections[self.current_index] != UNANSWERED
        )

    # ── transitions ───────────────────────────────────────────────────────

    def start(self) -> bool:
        if self.state is not SessionState.NOT_STARTED:
            logger.debug("start() ignored: session already %s", self.state.value)
            return False
        self.started_at = self._clock()
        self.state = SessionState.IN_PROGRESS
        return True

    def select_answer(self, question_index: int, option_index: int) -> bool:
        if self.state is not SessionState.IN_PROGRESS:
            logger.warning(
                "select_answer() ignored: session is %s", self.state.value
            )
            return False
        if not 0 <= question_index < self.total_questions:
            logger.warning(
                "select_answer() ignored: question index %d out of range [0, %d)",
                question_index, self.total_questions,
            )
            return False
        options = self.quiz.questions[question_index].options
        if not 0 <= option_index < len(options):
            logger.warning(
                "select_answer() ignored: option index %d out of range [0, %d)",
                option_index, len(options),
            )
            return False
        self.selections[question_index] = option_index
        return True

    def next(self) -> bool:
        if not self.can_advance:
            logger.debug("next() ignored: current question unanswered or not in progress")
            return False
        if self.is_last_question:
            return False
        self.current_index += 1
        return True

    def previous(self) -> bool:
        if self.state is not SessionState.IN_PROGRESS or self.current_index == 0:
            return False
        self.current_index -= 1
        return True

    def finish(self) -> bool:
        """Complete the session from an answered last question.

        Computes ``time_spent`` once; later calls leave score and time alone.
        """
        if self.state is not SessionState.IN_PROGRESS:
            logger.debug("finish() ignored: session is %s", self.state.value)
            return False
        if not self.is_last_question or not self.can_advance:
            logger.warning(
                "finish() ignored: cursor at %d/%d, answered=%s",
                self.current_index + 1, self.total_questions, self.can_advance,
            )
            return False
        self.completed_at = self._clock()
        elapsed = (self.completed_at - self.started_at).total_seconds()
        self.time_spent = max(0, int(elapsed))
        self.state = SessionState.COMPLETED
        self.results_shown = True
        logger.info(
            "Quiz %s completed: %d/%d in %ds",
            self.quiz.id, self.score, self.total_questions, self.time_spent,
        )
        return True

    def reset(self) -> None:
        """Back to NOT_STARTED for a retake."""
        self._reset_state()

    def mark_submitted(self, attempt: AttemptRead) -> None:
        self.submitted = True
        self.attempt = attempt

    # ── helpers ───────────────────────────────────────────────────────────

    def review(self) -> list[QuestionReview]:
        """Per-question feedback; only meaningful once results are shown."""
        if not self.results_shown:
            return []
        return [
            QuestionReview(
                index=i,
                selected=selected,
                correct_answer=q.correct_answer,
                is_correct=selected == q.correct_answer,
                explanation=q.explanation,
            )
            for i, (q, selected) in enumerate(zip(self.quiz.questions, self.selections))
        ]

    @classmethod
    def replay(
        cls,
        quiz: Quiz,
        selections: Sequence[int],
        started_at: datetime,
        clock: Clock = _utcnow,
    ) -> "QuizSession":
        """Rebuild a session from a reader's selections and drive it to completion.

        The caller checks ``completed`` on the result: the replay stops short
        whenever the selections would not have let the reader finish.
        """
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)
        session = cls(quiz, clock=clock)
        session.start()
        session.started_at = started_at
        for i, option in enumerate(selections[: quiz.total_questions]):
            session.select_answer(i, option)
        while session.next():
            pass
        session.finish()
        return session
