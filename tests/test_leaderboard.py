"""Tests for the leaderboard ranking engine."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from gamification.core.errors import PersistenceFailure, ValidationFailure
from gamification.db.models import LeaderboardEntry
from gamification.schemas.attempt import AttemptRead
from gamification.schemas.leaderboard import LeaderboardEntryRead
from gamification.services.leaderboard import LeaderboardEngine, rank_entries

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def content_item_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def engine(store) -> LeaderboardEngine:
    return LeaderboardEngine(store)


def _attempt(user_id, content_item_id, time_spent, score=5, total=5, minutes=0) -> AttemptRead:
    return AttemptRead(
        id=uuid.uuid4(),
        user_id=user_id,
        quiz_id=uuid.uuid4(),
        content_item_id=content_item_id,
        score=score,
        total_questions=total,
        time_spent=time_spent,
        completed_at=T0 + timedelta(minutes=minutes),
    )


# ── Recording ─────────────────────────────────────────────────────────────────


def test_non_perfect_attempt_is_ignored(db, engine, content_item_id):
    assert engine.record_perfect_attempt(_attempt(uuid.uuid4(), content_item_id, 10, score=4)) is None
    assert db.query(LeaderboardEntry).count() == 0


def test_first_perfect_attempt_ranks_first(engine, content_item_id):
    entry = engine.record_perfect_attempt(_attempt(uuid.uuid4(), content_item_id, 40))
    assert entry.rank == 1
    assert entry.time_spent == 40


def test_faster_attempt_replaces_entry(db, engine, content_item_id):
    user = uuid.uuid4()
    engine.record_perfect_attempt(_attempt(user, content_item_id, 40))
    better = _attempt(user, content_item_id, 30, minutes=1)
    entry = engine.record_perfect_attempt(better)

    assert entry.time_spent == 30
    assert entry.attempt_id == better.id
    rows = db.query(LeaderboardEntry).all()
    assert len(rows) == 1
    assert rows[0].time_spent == 30


def test_slower_attempt_is_discarded(db, engine, content_item_id):
    user = uuid.uuid4()
    first = _attempt(user, content_item_id, 30)
    engine.record_perfect_attempt(first)
    entry = engine.record_perfect_attempt(_attempt(user, content_item_id, 50, minutes=1))

    assert entry.time_spent == 30
    assert entry.attempt_id == first.id
    assert db.query(LeaderboardEntry).count() == 1


def test_ranks_follow_time_spent(engine, content_item_id):
    users = {t: uuid.uuid4() for t in (50, 30, 40)}
    for minute, (time_spent, user) in enumerate(users.items()):
        engine.record_perfect_attempt(_attempt(user, content_item_id, time_spent, minutes=minute))

    board = engine.get_leaderboard(content_item_id)
    assert [(e.time_spent, e.rank) for e in board] == [(30, 1), (40, 2), (50, 3)]
    assert board[0].user_id == users[30]


def test_stored_ranks_match_read_ranks(db, engine, content_item_id):
    for minute, time_spent in enumerate((50, 30, 40, 35)):
        engine.record_perfect_attempt(_attempt(uuid.uuid4(), content_item_id, time_spent, minutes=minute))

    stored = {r.user_id: r.rank for r in db.query(LeaderboardEntry).all()}
    read = {e.user_id: e.rank for e in engine.get_leaderboard(content_item_id)}
    assert stored == read
    assert sorted(stored.values()) == [1, 2, 3, 4]


def test_time_ties_go_to_earlier_finisher(engine, content_item_id):
    late, early = uuid.uuid4(), uuid.uuid4()
    engine.record_perfect_attempt(_attempt(late, content_item_id, 30, minutes=5))
    engine.record_perfect_attempt(_attempt(early, content_item_id, 30, minutes=1))

    board = engine.get_leaderboard(content_item_id)
    assert [e.user_id for e in board] == [early, late]


def test_boards_are_per_content_item(engine):
    a, b = uuid.uuid4(), uuid.uuid4()
    engine.record_perfect_attempt(_attempt(uuid.uuid4(), a, 30))
    engine.record_perfect_attempt(_attempt(uuid.uuid4(), b, 60))
    assert engine.get_leaderboard(b)[0].rank == 1
    assert len(engine.get_leaderboard(a)) == 1


def test_failed_write_leaves_no_partial_ranking(db, engine, content_item_id):
    slow = uuid.uuid4()
    engine.record_perfect_attempt(_attempt(slow, content_item_id, 50))

    boom = OperationalError("COMMIT", {}, Exception("disk I/O error"))
    with patch.object(db, "commit", side_effect=boom):
        with pytest.raises(PersistenceFailure):
            engine.record_perfect_attempt(_attempt(uuid.uuid4(), content_item_id, 20, minutes=1))

    rows = db.query(LeaderboardEntry).all()
    assert [(r.user_id, r.rank) for r in rows] == [(slow, 1)]


# ── Reading ───────────────────────────────────────────────────────────────────


def test_limit_truncates(engine, content_item_id):
    for minute in range(5):
        engine.record_perfect_attempt(_attempt(uuid.uuid4(), content_item_id, 30 + minute, minutes=minute))
    assert [e.rank for e in engine.get_leaderboard(content_item_id, limit=2)] == [1, 2]


def test_non_positive_limit_is_rejected(engine, content_item_id):
    with pytest.raises(ValidationFailure):
        engine.get_leaderboard(content_item_id, limit=0)


def test_empty_board(engine, content_item_id):
    assert engine.get_leaderboard(content_item_id) == []


def test_rank_entries_is_pure():
    item = uuid.uuid4()
    entries = [
        LeaderboardEntryRead(
            user_id=uuid.uuid4(), content_item_id=item, score=3, total_questions=3,
            time_spent=t, completed_at=T0,
        )
        for t in (9, 3, 6)
    ]
    ranked = rank_entries(entries)
    assert [e.time_spent for e in ranked] == [3, 6, 9]
    assert all(e.rank is None for e in entries)
