"""Tests for the badge catalog and achievement rule engine."""

import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from gamification.core.errors import PersistenceFailure, ValidationFailure
from gamification.db.models import Notification, ProfileBadge
from gamification.schemas.badge import Trigger
from gamification.services.achievements import RULES, AchievementEngine, fire_trigger
from gamification.services.badge_catalog import BADGES, get_badge
from gamification.services.notifications import NotificationKind, SqlNotifier


@pytest.fixture
def engine(db, store) -> AchievementEngine:
    return AchievementEngine(store, SqlNotifier(db))


# ── Catalog ───────────────────────────────────────────────────────────────────


def test_catalog_ids_are_unique():
    ids = [b.id for b in BADGES]
    assert len(ids) == len(set(ids))


def test_every_rule_points_at_a_catalog_badge():
    for rules in RULES.values():
        for _, badge_id in rules:
            assert get_badge(badge_id) is not None, badge_id


# ── grant ─────────────────────────────────────────────────────────────────────


def test_grant_is_idempotent(db, engine):
    user = uuid.uuid4()
    assert engine.grant(user, "first_ink") is True
    assert engine.grant(user, "first_ink") is False

    assert db.query(ProfileBadge).filter_by(user_id=user).count() == 1
    notes = db.query(Notification).filter_by(user_id=user).all()
    assert len(notes) == 1
    assert notes[0].type == NotificationKind.BADGE_EARNED.value
    assert notes[0].title == "New Badge Earned!"
    assert '"First Ink"' in notes[0].message
    assert notes[0].action_url == f"/profile/{user}"


def test_grant_unknown_badge_is_rejected(engine):
    with pytest.raises(ValidationFailure):
        engine.grant(uuid.uuid4(), "no_such_badge")


def test_lost_race_is_not_a_new_grant():
    badges = MagicMock()
    badges.get_badges.return_value = set()
    badges.add_badge.return_value = False  # another writer got there first
    notifier = MagicMock()

    assert AchievementEngine(badges, notifier).grant(uuid.uuid4(), "scribe") is False
    notifier.notify.assert_not_called()


def test_failed_write_is_not_marked_granted():
    badges = MagicMock()
    badges.get_badges.return_value = set()
    badges.add_badge.side_effect = PersistenceFailure("profile_badges/add failed")
    notifier = MagicMock()

    with pytest.raises(PersistenceFailure):
        AchievementEngine(badges, notifier).grant(uuid.uuid4(), "scribe")
    notifier.notify.assert_not_called()


def test_notifier_swallows_write_errors():
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("locked"))

    SqlNotifier(db).notify(uuid.uuid4(), NotificationKind.BADGE_EARNED, {"title": "t", "message": "m"})
    db.rollback.assert_called_once()


# ── evaluate ──────────────────────────────────────────────────────────────────


def test_counter_jump_grants_every_lower_threshold(engine, store):
    user = uuid.uuid4()
    granted = engine.evaluate(user, Trigger.FOLLOW_GAINED, 150)
    assert granted == ["rising_star", "influencer"]
    assert store.get_badges(user) == {"rising_star", "influencer"}


def test_reevaluation_grants_nothing_new(engine):
    user = uuid.uuid4()
    engine.evaluate(user, Trigger.CONTENT_PUBLISHED, 5)
    assert engine.evaluate(user, Trigger.CONTENT_PUBLISHED, 5) == []
    assert engine.evaluate(user, Trigger.CONTENT_PUBLISHED, 10) == ["wordsmith"]


def test_below_threshold_grants_nothing(engine):
    assert engine.evaluate(uuid.uuid4(), Trigger.LIKE_RECEIVED, 99) == []
    assert engine.evaluate(uuid.uuid4(), Trigger.CONTENT_VIEWED, 0) == []


@pytest.mark.parametrize(
    "rank, expected",
    [
        (1, ["leaderboard_legend", "top_scorer"]),
        (10, ["leaderboard_legend"]),
        (11, []),
        (0, []),
    ],
)
def test_rank_tiers(engine, rank, expected):
    assert engine.evaluate(uuid.uuid4(), Trigger.LEADERBOARD_RANKED, rank) == expected


def test_featured_content_earns_editors_choice(engine):
    assert engine.evaluate(uuid.uuid4(), Trigger.CONTENT_FEATURED, 1) == ["editors_choice"]


def test_partial_failure_grants_the_rest_then_raises():
    badges = MagicMock()
    badges.get_badges.return_value = set()

    def add(user_id, badge_id):
        if badge_id == "scribe":
            raise PersistenceFailure("profile_badges/add failed")
        return True

    badges.add_badge.side_effect = add
    engine = AchievementEngine(badges, MagicMock())

    with pytest.raises(PersistenceFailure) as exc_info:
        engine.evaluate(uuid.uuid4(), Trigger.CONTENT_PUBLISHED, 12)
    assert exc_info.value.context["failed"] == ["scribe"]
    assert exc_info.value.context["granted"] == ["first_ink", "wordsmith"]


# ── fire_trigger ──────────────────────────────────────────────────────────────


def test_fire_trigger_swallows_failures():
    badges = MagicMock()
    badges.get_badges.side_effect = PersistenceFailure("profile_badges/get failed")
    engine = AchievementEngine(badges, MagicMock())
    assert fire_trigger(engine, uuid.uuid4(), Trigger.COMMENT_POSTED, 60) == []


def test_fire_trigger_returns_grants(engine):
    assert fire_trigger(engine, uuid.uuid4(), Trigger.COMMENT_POSTED, 60) == [
        "conversation_starter",
        "debater",
    ]


def test_fire_trigger_reports_grants_before_a_failure():
    badges = MagicMock()
    badges.get_badges.return_value = set()

    def add(user_id, badge_id):
        if badge_id == "top_scorer":
            raise PersistenceFailure("profile_badges/add failed")
        return True

    badges.add_badge.side_effect = add
    engine = AchievementEngine(badges, MagicMock())

    assert fire_trigger(engine, uuid.uuid4(), Trigger.LEADERBOARD_RANKED, 1) == ["leaderboard_legend"]
