"""Leaderboard schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel


class LeaderboardEntryRead(BaseModel):
    """Best (fastest) perfect attempt of one user on one content item."""

    user_id: uuid.UUID
    content_item_id: uuid.UUID
    score: int
    total_questions: int
    time_spent: int
    completed_at: datetime
    attempt_id: uuid.UUID | None = None
    rank: int | None = None

    model_config = {"from_attributes": True}
