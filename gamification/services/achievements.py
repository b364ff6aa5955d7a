"""Threshold-based achievement (badge) rule engine.

Each trigger owns an ordered list of ``(predicate, badge_id)`` rules. On every
trigger the whole list is re-evaluated against the fresh counter value:
counters can skip values (0 → 150 followers), so every threshold at or below
the new value must be tried. Already-held badges fall out through the
idempotent ``grant``, which is the only concurrency control between racing
triggers for the same user.
"""

import logging
import uuid
from typing import Callable

from gamification.core.errors import GamificationError, PersistenceFailure, ValidationFailure
from gamification.schemas.badge import Trigger
from gamification.services.badge_catalog import Badge, get_badge
from gamification.services.notifications import NotificationKind, Notifier
from gamification.services.store import BadgeStore

logger = logging.getLogger(__name__)

Predicate = Callable[[int], bool]


def at_least(threshold: int) -> Predicate:
    return lambda value: value >= threshold


def rank_within(top: int) -> Predicate:
    return lambda rank: 1 <= rank <= top


RULES: dict[Trigger, list[tuple[Predicate, str]]] = {
    Trigger.CONTENT_PUBLISHED: [
        (at_least(1), "first_ink"),
        (at_least(5), "scribe"),
        (at_least(10), "wordsmith"),
    ],
    Trigger.FOLLOW_GAINED: [
        (at_least(10), "rising_star"),
        (at_least(100), "influencer"),
        (at_least(1000), "thought_leader"),
    ],
    Trigger.COMMENT_POSTED: [
        (at_least(1), "conversation_starter"),
        (at_least(50), "debater"),
    ],
    Trigger.CONTENT_VIEWED: [(at_least(10), "observer")],
    Trigger.VIEW_COUNTED: [(at_least(1000), "viral_hit")],
    Trigger.LIKE_RECEIVED: [(at_least(100), "crowd_favorite")],
    Trigger.CONTENT_FEATURED: [(at_least(1), "editors_choice")],
    Trigger.QUIZ_ATTEMPTED: [(at_least(10), "quiz_whiz")],
    Trigger.LEADERBOARD_RANKED: [
        (rank_within(10), "leaderboard_legend"),
        (rank_within(1), "top_scorer"),
    ],
}


def badge_notification(user_id: uuid.UUID, badge: Badge) -> dict[str, str]:
    return {
        "badge_id": badge.id,
        "title": "New Badge Earned!",
        "message": f'You earned the "{badge.name}" badge: {badge.description}',
        "action_url": f"/profile/{user_id}",
    }


class AchievementEngine:
    """Grants badges idempotently and evaluates the rule table."""

    def __init__(self, badges: BadgeStore, notifier: Notifier) -> None:
        self._badges = badges
        self._notifier = notifier

    def grant(self, user_id: uuid.UUID, badge_id: str) -> bool:
        """Add ``badge_id`` to the user's set. True only when newly granted.

        The membership read is a shortcut; the conditional ``add_badge`` write
        is what keeps two racing grants from both succeeding.
        """
        badge = get_badge(badge_id)
        if badge is None:
            raise ValidationFailure(f"Unknown badge {badge_id!r}", context={"badge_id": badge_id})

        if badge_id in self._badges.get_badges(user_id):
            return False
        if not self._badges.add_badge(user_id, badge_id):
            return False

        logger.info("Badge %s granted to %s", badge_id, user_id)
        self._notifier.notify(
            user_id, NotificationKind.BADGE_EARNED, badge_notification(user_id, badge)
        )
        return True

    def evaluate(self, user_id: uuid.UUID, trigger: Trigger, value: int) -> list[str]:
        """Try every rule of ``trigger`` against ``value``; return newly granted ids.

        Each satisfied rule is granted independently. If any grant fails the
        rest are still attempted and a ``PersistenceFailure`` naming the failed
        badges is raised afterwards; nothing is retried here.
        """
        granted: list[str] = []
        failed: list[str] = []
        for predicate, badge_id in RULES[trigger]:
            if not predicate(value):
                continue
            try:
                if self.grant(user_id, badge_id):
                    granted.append(badge_id)
            except PersistenceFailure:
                failed.append(badge_id)

        if failed:
            raise PersistenceFailure(
                f"Could not grant {', '.join(failed)} to {user_id}",
                context={"trigger": trigger.value, "failed": failed, "granted": granted},
            )
        return granted


def fire_trigger(
    engine: AchievementEngine, user_id: uuid.UUID, trigger: Trigger, value: int
) -> list[str]:
    """Fire-and-forget entry point for business operations.

    A badge problem must never fail the publish/follow/submit that caused it,
    so errors are logged. Badges granted before a failure are still
    returned. The next trigger for the same user re-evaluates everything.
    """
    try:
        return engine.evaluate(user_id, trigger, value)
    except GamificationError as exc:
        logger.warning(
            "Achievement check %s=%d for %s failed: %s",
            trigger.value, value, user_id, exc, exc_info=True,
        )
        if isinstance(exc, PersistenceFailure):
            return list(exc.context.get("granted", []))
        return []
