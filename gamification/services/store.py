"""Storage collaborators used by the engine, plus their SQLAlchemy implementation.

The engine only talks to the protocols below. ``SqlStore`` implements all
of them on one SQLAlchemy ``Session``: every write commits on its own, and
any database error rolls the session back and surfaces as
``PersistenceFailure``.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Protocol, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gamification.core.errors import Conflict, PersistenceFailure
from gamification.db.models import LeaderboardEntry, ProfileBadge, Quiz, QuizAttempt
from gamification.schemas.attempt import AttemptCreate, AttemptRead
from gamification.schemas.leaderboard import LeaderboardEntryRead

logger = logging.getLogger(__name__)


# ── Protocols ─────────────────────────────────────────────────────────────────


class QuizReader(Protocol):
    def get_quiz_by_content_item(self, content_item_id: uuid.UUID) -> dict[str, Any] | None:
        """Raw quiz row (``id``, ``content_item_id``, ``title``, ``questions``) or None."""


class AttemptWriter(Protocol):
    def insert_attempt(self, attempt: AttemptCreate) -> tuple[AttemptRead, bool]:
        """Store an attempt. The flag is False when ``submission_id`` was already stored."""


class AttemptCounter(Protocol):
    def count_quiz_attempts(self, user_id: uuid.UUID) -> int: ...


class LeaderboardStore(Protocol):
    def get_entries(self, content_item_id: uuid.UUID) -> list[LeaderboardEntryRead]: ...

    def upsert_entry(self, entry: LeaderboardEntryRead) -> None: ...

    def upsert_entries(self, entries: Sequence[LeaderboardEntryRead]) -> None:
        """Write all entries or none of them."""


class BadgeStore(Protocol):
    def get_badges(self, user_id: uuid.UUID) -> set[str]: ...

    def add_badge(self, user_id: uuid.UUID, badge_id: str) -> bool:
        """Add only if absent. Returns False when the badge was already there."""


# ── helpers ───────────────────────────────────────────────────────────────────


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _attempt_read(row: QuizAttempt) -> AttemptRead:
    read = AttemptRead.model_validate(row)
    return read.model_copy(update={"completed_at": _as_utc(read.completed_at)})


def _entry_read(row: LeaderboardEntry) -> LeaderboardEntryRead:
    read = LeaderboardEntryRead.model_validate(row)
    return read.model_copy(update={"completed_at": _as_utc(read.completed_at)})


# ── SQLAlchemy implementation ─────────────────────────────────────────────────


class SqlStore:
    """All storage collaborators backed by the service database."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _failures(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s failed: %s", operation, exc)
            raise PersistenceFailure(
                f"{operation} failed", context={"operation": operation, **context}
            ) from exc

    # ── quizzes ───────────────────────────────────────────────────────────

    def get_quiz_by_content_item(self, content_item_id: uuid.UUID) -> dict[str, Any] | None:
        with self._failures("quizzes/getByContentItem", content_item_id=str(content_item_id)):
            row = self.db.scalars(
                select(Quiz).where(Quiz.content_item_id == content_item_id)
            ).first()
        if row is None:
            return None
        return {
            "id": row.id,
            "content_item_id": row.content_item_id,
            "title": row.title,
            "questions": row.questions_json or [],
        }

    # ── attempts ──────────────────────────────────────────────────────────

    def find_attempt_by_submission(self, submission_id: uuid.UUID) -> AttemptRead | None:
        with self._failures("quiz_attempts/getBySubmission"):
            row = self.db.scalars(
                select(QuizAttempt).where(QuizAttempt.submission_id == submission_id)
            ).first()
        return _attempt_read(row) if row else None

    def insert_attempt(self, attempt: AttemptCreate) -> tuple[AttemptRead, bool]:
        """Persist an attempt; a repeated ``submission_id`` returns ``(stored, False)``.

        Raises ``Conflict`` when the stored row belongs to another user.
        """
        row = QuizAttempt(**attempt.model_dump())
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if attempt.submission_id is not None:
                existing = self.find_attempt_by_submission(attempt.submission_id)
                if existing is not None:
                    if existing.user_id != attempt.user_id:
                        raise Conflict(
                            "Submission id already used",
                            context={"submission_id": str(attempt.submission_id)},
                        )
                    logger.info(
                        "Duplicate submission %s, returning attempt %s",
                        attempt.submission_id, existing.id,
                    )
                    return existing, False
            raise PersistenceFailure(
                "quiz_attempts/insert failed",
                context={"operation": "quiz_attempts/insert"},
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("quiz_attempts/insert failed: %s", exc)
            raise PersistenceFailure(
                "quiz_attempts/insert failed",
                context={"operation": "quiz_attempts/insert"},
            ) from exc
        self.db.refresh(row)
        return _attempt_read(row), True

    def list_attempts(self, user_id: uuid.UUID, skip: int = 0, limit: int = 20) -> list[AttemptRead]:
        with self._failures("quiz_attempts/listByUser", user_id=str(user_id)):
            rows = self.db.scalars(
                select(QuizAttempt)
                .where(QuizAttempt.user_id == user_id)
                .order_by(QuizAttempt.completed_at.desc())
                .offset(skip)
                .limit(limit)
            ).all()
        return [_attempt_read(r) for r in rows]

    def get_user_attempt(self, user_id: uuid.UUID, content_item_id: uuid.UUID) -> AttemptRead | None:
        """The user's most recent attempt on a content item, if any."""
        with self._failures(
            "quiz_attempts/getByUserAndContentItem",
            user_id=str(user_id),
            content_item_id=str(content_item_id),
        ):
            row = self.db.scalars(
                select(QuizAttempt)
                .where(
                    QuizAttempt.user_id == user_id,
                    QuizAttempt.content_item_id == content_item_id,
                )
                .order_by(QuizAttempt.completed_at.desc())
                .limit(1)
            ).first()
        return _attempt_read(row) if row else None

    def count_quiz_attempts(self, user_id: uuid.UUID) -> int:
        with self._failures("quiz_attempts/count", user_id=str(user_id)):
            return self.db.scalar(
                select(func.count()).select_from(QuizAttempt).where(QuizAttempt.user_id == user_id)
            ) or 0

    # ── leaderboard ───────────────────────────────────────────────────────

    def get_entries(self, content_item_id: uuid.UUID) -> list[LeaderboardEntryRead]:
        with self._failures("leaderboard/getEntries", content_item_id=str(content_item_id)):
            rows = self.db.scalars(
                select(LeaderboardEntry)
                .where(LeaderboardEntry.content_item_id == content_item_id)
                .order_by(LeaderboardEntry.rank.asc().nulls_last(), LeaderboardEntry.completed_at)
            ).all()
        return [_entry_read(r) for r in rows]

    def upsert_entry(self, entry: LeaderboardEntryRead) -> None:
        self.upsert_entries([entry])

    def upsert_entries(self, entries: Sequence[LeaderboardEntryRead]) -> None:
        if not entries:
            return
        with self._failures("leaderboard/upsert", count=len(entries)):
            for entry in entries:
                row = self.db.scalars(
                    select(LeaderboardEntry).where(
                        LeaderboardEntry.user_id == entry.user_id,
                        LeaderboardEntry.content_item_id == entry.content_item_id,
                    )
                ).first()
                if row is None:
                    row = LeaderboardEntry(
                        user_id=entry.user_id, content_item_id=entry.content_item_id
                    )
                    self.db.add(row)
                row.attempt_id = entry.attempt_id
                row.score = entry.score
                row.total_questions = entry.total_questions
                row.time_spent = entry.time_spent
                row.completed_at = entry.completed_at
                row.rank = entry.rank
            self.db.commit()

    # ── badges ────────────────────────────────────────────────────────────

    def get_badges(self, user_id: uuid.UUID) -> set[str]:
        with self._failures("profile_badges/get", user_id=str(user_id)):
            return set(
                self.db.scalars(
                    select(ProfileBadge.badge_id).where(ProfileBadge.user_id == user_id)
                ).all()
            )

    def add_badge(self, user_id: uuid.UUID, badge_id: str) -> bool:
        # uq_profile_badge turns a concurrent duplicate into an IntegrityError
        try:
            self.db.add(ProfileBadge(user_id=user_id, badge_id=badge_id))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.debug("Badge %s already held by %s", badge_id, user_id)
            return False
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("profile_badges/add failed: %s", exc)
            raise PersistenceFailure(
                "profile_badges/add failed",
                context={"operation": "profile_badges/add", "badge_id": badge_id},
            ) from exc
        return True
