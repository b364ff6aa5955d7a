"""Leaderboard routes."""

import uuid

from fastapi import APIRouter, Depends, Query

from gamification.api.deps import get_leaderboard_engine
from gamification.config import settings
from gamification.schemas.leaderboard import LeaderboardEntryRead
from gamification.services.leaderboard import LeaderboardEngine

router = APIRouter()


@router.get("/{content_item_id}", response_model=list[LeaderboardEntryRead])
def get_leaderboard(
    content_item_id: uuid.UUID,
    limit: int = Query(settings.LEADERBOARD_DEFAULT_LIMIT, ge=1, le=settings.LEADERBOARD_MAX_LIMIT),
    engine: LeaderboardEngine = Depends(get_leaderboard_engine),
):
    """Fastest perfect runs for a content item, best first."""
    return engine.get_leaderboard(content_item_id, limit)
