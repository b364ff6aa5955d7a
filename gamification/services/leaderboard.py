"""Per-content-item leaderboard of perfect quiz attempts.

Only perfect attempts qualify, and each (user, content item) keeps only its
fastest one. After any insert or improvement the whole entry set of that item
is re-sorted and re-ranked, and the changed rows are written in a single
batch so a failed write never leaves a half-ranked table behind.

Ordering is (score desc, time_spent asc, completed_at asc). Score is always
perfect here, so time is the real key; ties in time go to whoever finished
first. The read path sorts with the very same key.
"""

import logging
import uuid
from typing import Iterable

from gamification.config import settings
from gamification.core.errors import ValidationFailure
from gamification.schemas.attempt import AttemptRead
from gamification.schemas.leaderboard import LeaderboardEntryRead
from gamification.services.store import LeaderboardStore

logger = logging.getLogger(__name__)


def ranking_key(entry: LeaderboardEntryRead) -> tuple:
    return (-entry.score, entry.time_spent, entry.completed_at)


def rank_entries(entries: Iterable[LeaderboardEntryRead]) -> list[LeaderboardEntryRead]:
    """Sort by ``ranking_key`` and assign 1-based ranks (stable for full ties)."""
    ordered = sorted(entries, key=ranking_key)
    return [
        entry.model_copy(update={"rank": position})
        for position, entry in enumerate(ordered, start=1)
    ]


class LeaderboardEngine:
    def __init__(self, store: LeaderboardStore) -> None:
        self._store = store

    def record_perfect_attempt(self, attempt: AttemptRead) -> LeaderboardEntryRead | None:
        """Insert or improve the user's entry and re-rank the item.

        Returns the user's (possibly unchanged) ranked entry, or None when the
        attempt is not perfect.
        """
        if not attempt.is_perfect:
            logger.debug(
                "Attempt %s scored %d/%d, not leaderboard eligible",
                attempt.id, attempt.score, attempt.total_questions,
            )
            return None

        entries = self._store.get_entries(attempt.content_item_id)
        by_user = {e.user_id: e for e in entries}
        existing = by_user.get(attempt.user_id)

        if existing is not None and existing.time_spent <= attempt.time_spent:
            logger.debug(
                "Attempt %s (%ds) no faster than entry for %s (%ds), discarded",
                attempt.id, attempt.time_spent, attempt.user_id, existing.time_spent,
            )
            return existing

        by_user[attempt.user_id] = LeaderboardEntryRead(
            user_id=attempt.user_id,
            content_item_id=attempt.content_item_id,
            attempt_id=attempt.id,
            score=attempt.score,
            total_questions=attempt.total_questions,
            time_spent=attempt.time_spent,
            completed_at=attempt.completed_at,
            rank=None,
        )

        ranked = rank_entries(by_user.values())
        previous_ranks = {e.user_id: e.rank for e in entries}
        changed = [
            e for e in ranked
            if e.user_id == attempt.user_id or previous_ranks.get(e.user_id) != e.rank
        ]
        self._store.upsert_entries(changed)

        mine = next(e for e in ranked if e.user_id == attempt.user_id)
        logger.info(
            "Leaderboard %s: %s ranked #%d (%ds), %d rows re-ranked",
            attempt.content_item_id, attempt.user_id, mine.rank, mine.time_spent, len(changed),
        )
        return mine

    def get_leaderboard(
        self, content_item_id: uuid.UUID, limit: int | None = None
    ) -> list[LeaderboardEntryRead]:
        """Entries sorted by rank ascending, truncated to ``limit``."""
        if limit is None:
            limit = settings.LEADERBOARD_DEFAULT_LIMIT
        if limit < 1:
            raise ValidationFailure(f"limit must be positive, got {limit}", context={"limit": limit})
        limit = min(limit, settings.LEADERBOARD_MAX_LIMIT)

        ranked = rank_entries(self._store.get_entries(content_item_id))
        return ranked[:limit]
