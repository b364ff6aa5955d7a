"""Trigger intake for the surrounding application.

Publish, follow, comment, view and like handlers live in the hosted
backend; after their own write succeeds they post the fresh counter here.
Evaluation is queued so the caller never waits on (or fails because of)
badge grants.
"""

import logging

from fastapi import APIRouter, Depends, status

from gamification.api.deps import require_service_role
from gamification.schemas.badge import TriggerEvent
from gamification.schemas.common import AcceptedResponse
from gamification.tasks import evaluate_achievements

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=AcceptedResponse, status_code=status.HTTP_202_ACCEPTED)
def report_trigger(body: TriggerEvent, _caller: dict = Depends(require_service_role)):
    """Queue a badge evaluation for one counter change."""
    task = evaluate_achievements.delay(str(body.user_id), body.trigger.value, body.value)
    logger.debug("Queued %s=%d for %s (task %s)", body.trigger.value, body.value, body.user_id, task.id)
    return AcceptedResponse(task_id=task.id)
