"""Pydantic schemas — re‑exported for convenience."""

from gamification.schemas.common import AcceptedResponse, ErrorResponse  # noqa: F401
from gamification.schemas.quiz import (  # noqa: F401
    Question,
    QuestionRead,
    Quiz,
    QuizRead,
)
from gamification.schemas.attempt import (  # noqa: F401
    AttemptCreate,
    AttemptRead,
    AttemptResult,
    AttemptSubmit,
    QuestionReview,
    SubmissionStatus,
)
from gamification.schemas.leaderboard import LeaderboardEntryRead  # noqa: F401
from gamification.schemas.badge import (  # noqa: F401
    BadgeCategory,
    BadgeRead,
    ProfileBadgesRead,
    Trigger,
    TriggerEvent,
)
