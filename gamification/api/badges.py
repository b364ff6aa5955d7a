"""Badge catalog and profile badge routes."""

import uuid

from fastapi import APIRouter, Depends

from gamification.api.deps import get_current_user_id, get_store
from gamification.schemas.badge import BadgeRead, ProfileBadgesRead
from gamification.services.badge_catalog import BADGES
from gamification.services.store import SqlStore

router = APIRouter()


def _profile_badges(store: SqlStore, user_id: uuid.UUID) -> ProfileBadgesRead:
    held = store.get_badges(user_id)
    # catalog order, not grant order
    return ProfileBadgesRead(
        user_id=user_id,
        badges=[BadgeRead.model_validate(b) for b in BADGES if b.id in held],
    )


@router.get("/catalog", response_model=list[BadgeRead])
def list_catalog():
    return [BadgeRead.model_validate(b) for b in BADGES]


@router.get("/me", response_model=ProfileBadgesRead)
def my_badges(
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: SqlStore = Depends(get_store),
):
    return _profile_badges(store, user_id)


@router.get("/users/{user_id}", response_model=ProfileBadgesRead)
def user_badges(user_id: uuid.UUID, store: SqlStore = Depends(get_store)):
    """Badges are public profile data."""
    return _profile_badges(store, user_id)
