"""Notification emit collaborator.

``notify`` is fire-and-forget: a failure is logged and swallowed so that it
can never undo or fail the grant that triggered it.
"""

import enum
import logging
import uuid
from typing import Any, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gamification.db.models import Notification

logger = logging.getLogger(__name__)


class NotificationKind(str, enum.Enum):
    BADGE_EARNED = "badge_earned"


class Notifier(Protocol):
    def notify(self, user_id: uuid.UUID, kind: NotificationKind, payload: dict[str, Any]) -> None: ...


class SqlNotifier:
    """Writes rows to the ``notifications`` table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def notify(self, user_id: uuid.UUID, kind: NotificationKind, payload: dict[str, Any]) -> None:
        try:
            self.db.add(
                Notification(
                    user_id=user_id,
                    type=kind.value,
                    title=payload.get("title", ""),
                    message=payload.get("message", ""),
                    action_url=payload.get("action_url"),
                )
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning(
                "Notification %s for %s not delivered (non-fatal): %s",
                kind.value, user_id, exc,
            )
