"""Attempt submission guard.

Turns exactly one completed ``QuizSession`` into exactly one persisted
attempt. ``session.submitted`` is set only after the storage call returns,
so a failed write can be retried; a second call after success is a no-op
that hands back the cached attempt.

A perfect attempt is forwarded to the leaderboard. Quiz achievements are
then fired without letting their failures reach the caller.
"""

import logging
import uuid
from dataclasses import dataclass, field

from gamification.core.errors import GamificationError, ValidationFailure
from gamification.schemas.attempt import AttemptCreate, AttemptRead, SubmissionStatus
from gamification.schemas.badge import Trigger
from gamification.schemas.leaderboard import LeaderboardEntryRead
from gamification.services.achievements import AchievementEngine, fire_trigger
from gamification.services.leaderboard import LeaderboardEngine
from gamification.services.quiz_session import QuizSession
from gamification.services.store import AttemptCounter, AttemptWriter

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    status: SubmissionStatus
    attempt: AttemptRead | None = None
    leaderboard_entry: LeaderboardEntryRead | None = None
    badges_granted: list[str] = field(default_factory=list)


class SubmissionGuard:
    def __init__(
        self,
        attempts: AttemptWriter,
        leaderboard: LeaderboardEngine,
        achievements: AchievementEngine | None = None,
        counter: AttemptCounter | None = None,
    ) -> None:
        self._attempts = attempts
        self._leaderboard = leaderboard
        self._achievements = achievements
        self._counter = counter

    def submit(
        self,
        session: QuizSession,
        user_id: uuid.UUID,
        submission_id: uuid.UUID | None = None,
    ) -> SubmissionResult:
        if session.submitted:
            logger.debug("Session for quiz %s already submitted", session.quiz.id)
            return SubmissionResult(SubmissionStatus.ALREADY_SUBMITTED, attempt=session.attempt)
        if not session.completed:
            raise ValidationFailure(
                "Only a completed session can be submitted",
                context={"state": session.state.value},
            )

        # PersistenceFailure and Conflict propagate; session.submitted stays False
        attempt, created = self._attempts.insert_attempt(
            AttemptCreate(
                user_id=user_id,
                quiz_id=session.quiz.id,
                content_item_id=session.quiz.content_item_id,
                score=session.score,
                total_questions=session.total_questions,
                time_spent=session.time_spent,
                completed_at=session.completed_at,
                submission_id=submission_id,
            )
        )
        session.mark_submitted(attempt)
        if not created:
            # stored by an earlier request; its side effects already ran there
            logger.info("Submission %s already stored as attempt %s", submission_id, attempt.id)
            return SubmissionResult(SubmissionStatus.ALREADY_SUBMITTED, attempt=attempt)
        logger.info(
            "Attempt %s stored for %s: %d/%d in %ds",
            attempt.id, user_id, attempt.score, attempt.total_questions, attempt.time_spent,
        )

        entry = None
        if attempt.is_perfect:
            # The attempt is already durable; a ranking failure still reaches the
            # caller, who can retry with record_perfect_attempt(session.attempt).
            entry = self._leaderboard.record_perfect_attempt(attempt)

        return SubmissionResult(
            SubmissionStatus.SUBMITTED,
            attempt=attempt,
            leaderboard_entry=entry,
            badges_granted=self._check_quiz_badges(user_id, entry),
        )

    def _check_quiz_badges(
        self, user_id: uuid.UUID, entry: LeaderboardEntryRead | None
    ) -> list[str]:
        if self._achievements is None:
            return []
        granted: list[str] = []
        if self._counter is not None:
            try:
                count = self._counter.count_quiz_attempts(user_id)
            except GamificationError as exc:
                logger.warning("Attempt count for %s unavailable: %s", user_id, exc)
            else:
                granted += fire_trigger(self._achievements, user_id, Trigger.QUIZ_ATTEMPTED, count)
        if entry is not None and entry.rank is not None:
            granted += fire_trigger(self._achievements, user_id, Trigger.LEADERBOARD_RANKED, entry.rank)
        return granted
