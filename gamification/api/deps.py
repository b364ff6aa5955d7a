"""FastAPI dependencies shared across routes."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from gamification.core.security import SERVICE_ROLE, decode_access_token
from gamification.db.session import get_db
from gamification.services.achievements import AchievementEngine
from gamification.services.leaderboard import LeaderboardEngine
from gamification.services.notifications import SqlNotifier
from gamification.services.store import SqlStore
from gamification.services.submission import SubmissionGuard

# Tokens come from the hosted auth provider; there is no login route here.
bearer_scheme = OAuth2PasswordBearer(tokenUrl="/auth/v1/token", auto_error=False)


def get_token_payload(token: str | None = Depends(bearer_scheme)) -> dict:
    """Decode the bearer JWT, or 401."""
    payload = decode_access_token(token) if token else None
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def get_current_user_id(payload: dict = Depends(get_token_payload)) -> uuid.UUID:
    """Return the authenticated user's id (the token subject)."""
    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload"
        )


def require_service_role(payload: dict = Depends(get_token_payload)) -> dict:
    """Raise 403 unless the caller is a trusted backend (service role token)."""
    if payload.get("role") != SERVICE_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Service role required"
        )
    return payload


def get_store(db: Session = Depends(get_db)) -> SqlStore:
    return SqlStore(db)


def get_leaderboard_engine(store: SqlStore = Depends(get_store)) -> LeaderboardEngine:
    return LeaderboardEngine(store)


def get_achievement_engine(store: SqlStore = Depends(get_store)) -> AchievementEngine:
    return AchievementEngine(store, SqlNotifier(store.db))


def get_submission_guard(
    store: SqlStore = Depends(get_store),
    leaderboard: LeaderboardEngine = Depends(get_leaderboard_engine),
    achievements: AchievementEngine = Depends(get_achievement_engine),
) -> SubmissionGuard:
    return SubmissionGuard(store, leaderboard, achievements, counter=store)
