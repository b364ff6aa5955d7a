"""Background tasks executed by Celery workers."""

import logging
import uuid

from gamification.celery_app import celery_app
from gamification.db.session import get_session_factory
from gamification.schemas.badge import Trigger
from gamification.services.achievements import AchievementEngine, fire_trigger
from gamification.services.notifications import SqlNotifier
from gamification.services.store import SqlStore

logger = logging.getLogger(__name__)


@celery_app.task(name="evaluate_achievements")
def evaluate_achievements(user_id: str, trigger: str, value: int) -> dict:
    """Evaluate one trigger's badge rules for a user.

    Not retried: a failed grant is picked up by the next trigger for the
    same user, which re-evaluates every threshold.
    """
    factory = get_session_factory()
    db = factory()
    try:
        engine = AchievementEngine(SqlStore(db), SqlNotifier(db))
        granted = fire_trigger(engine, uuid.UUID(user_id), Trigger(trigger), value)
        logger.info("Trigger %s=%d for %s → granted %s", trigger, value, user_id, granted or "nothing")
        return {"success": True, "user_id": user_id, "granted": granted}
    finally:
        db.close()
