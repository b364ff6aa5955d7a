"""API route package — imports all routers for main.py."""

from gamification.api.health import router as health_router  # noqa: F401
from gamification.api.quiz import router as quiz_router  # noqa: F401
from gamification.api.attempts import router as attempts_router  # noqa: F401
from gamification.api.leaderboard import router as leaderboard_router  # noqa: F401
from gamification.api.badges import router as badges_router  # noqa: F401
from gamification.api.events import router as events_router  # noqa: F401
