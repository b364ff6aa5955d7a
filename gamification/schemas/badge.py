"""Badge and trigger schemas."""

import uuid
from enum import Enum

from pydantic import BaseModel, Field


class BadgeCategory(str, Enum):
    WRITER = "writer"
    READER = "reader"
    COMMUNITY = "community"
    QUALITY = "quality"
    QUIZ = "quiz"


class Trigger(str, Enum):
    """User actions that feed a fresh counter value into the rule engine."""

    CONTENT_PUBLISHED = "content_published"      # author's published count
    FOLLOW_GAINED = "follow_gained"              # followee's follower count
    COMMENT_POSTED = "comment_posted"            # author's comment count
    CONTENT_VIEWED = "content_viewed"            # viewer's distinct items viewed
    VIEW_COUNTED = "view_counted"                # item's total views (author)
    LIKE_RECEIVED = "like_received"              # item's total likes (author)
    CONTENT_FEATURED = "content_featured"        # author's featured items
    QUIZ_ATTEMPTED = "quiz_attempted"            # user's quiz attempt count
    LEADERBOARD_RANKED = "leaderboard_ranked"    # resulting rank


class BadgeRead(BaseModel):
    id: str
    name: str
    description: str
    category: BadgeCategory

    model_config = {"from_attributes": True}


class ProfileBadgesRead(BaseModel):
    user_id: uuid.UUID
    badges: list[BadgeRead]


class TriggerEvent(BaseModel):
    """POST /api/events — a counter change reported by the surrounding app."""

    user_id: uuid.UUID
    trigger: Trigger
    value: int = Field(ge=0)
