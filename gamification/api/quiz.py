"""Quiz lookup routes."""

import uuid

from fastapi import APIRouter, Depends

from gamification.api.deps import get_store
from gamification.schemas.quiz import QuizRead
from gamification.services.quiz_loader import load_quiz
from gamification.services.store import SqlStore

router = APIRouter()


@router.get("/{content_item_id}", response_model=QuizRead)
def get_quiz(content_item_id: uuid.UUID, store: SqlStore = Depends(get_store)):
    """Return the quiz attached to a content item, without its answers."""
    return QuizRead.from_quiz(load_quiz(store, content_item_id))
