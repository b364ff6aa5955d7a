"""Attempt submission and retrieval routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status

from gamification.api.deps import get_current_user_id, get_store, get_submission_guard
from gamification.core.errors import NotFound, ValidationFailure
from gamification.schemas.attempt import AttemptRead, AttemptResult, AttemptSubmit, SubmissionStatus
from gamification.services.quiz_loader import load_quiz
from gamification.services.quiz_session import QuizSession
from gamification.services.store import SqlStore
from gamification.services.submission import SubmissionGuard

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=AttemptResult, status_code=status.HTTP_201_CREATED)
def submit_attempt(
    body: AttemptSubmit,
    response: Response,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: SqlStore = Depends(get_store),
    guard: SubmissionGuard = Depends(get_submission_guard),
):
    """Score a finished quiz session and store it once.

    The client sends its raw selections; the score is recomputed here by
    replaying them through a ``QuizSession``. Re-sending the same
    ``submission_id`` returns the stored attempt with status
    ``already_submitted`` instead of creating a second one.
    """
    existing = store.find_attempt_by_submission(body.submission_id)
    if existing is not None:
        if existing.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail="Submission id already used"
            )
        response.status_code = status.HTTP_200_OK
        return AttemptResult(status=SubmissionStatus.ALREADY_SUBMITTED, attempt=existing)

    quiz = load_quiz(store, body.content_item_id)
    if len(body.selections) != quiz.total_questions:
        raise ValidationFailure(
            f"Expected {quiz.total_questions} selections, got {len(body.selections)}",
            context={"content_item_id": str(body.content_item_id)},
        )

    session = QuizSession.replay(quiz, body.selections, body.started_at)
    if not session.completed:
        raise ValidationFailure(
            "Every question must be answered before submitting",
            context={"answered": session.answered_count, "total": quiz.total_questions},
        )

    result = guard.submit(session, user_id, submission_id=body.submission_id)
    if result.status is SubmissionStatus.ALREADY_SUBMITTED:
        # a concurrent request with the same submission_id stored it first
        response.status_code = status.HTTP_200_OK
        return AttemptResult(status=result.status, attempt=result.attempt)
    entry = result.leaderboard_entry
    return AttemptResult(
        status=result.status,
        attempt=result.attempt,
        rank=entry.rank if entry else None,
        badges_granted=result.badges_granted,
        review=session.review(),
    )


@router.get("/", response_model=list[AttemptRead])
def list_attempts(
    skip: int = 0,
    limit: int = 20,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: SqlStore = Depends(get_store),
):
    """List the current user's past attempts, newest first."""
    return store.list_attempts(user_id, skip=skip, limit=limit)


@router.get("/{content_item_id}/me", response_model=AttemptRead)
def get_my_attempt(
    content_item_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    store: SqlStore = Depends(get_store),
):
    """The current user's latest attempt on a content item, for returning readers."""
    attempt = store.get_user_attempt(user_id, content_item_id)
    if attempt is None:
        raise NotFound(
            "No attempt for this content item",
            context={"content_item_id": str(content_item_id)},
        )
    return attempt
