"""Quiz model loader: content item id → validated ``Quiz``."""

import logging
import uuid

from pydantic import ValidationError

from gamification.core.errors import NotFound, ValidationFailure
from gamification.schemas.quiz import Quiz
from gamification.services.store import QuizReader

logger = logging.getLogger(__name__)


def load_quiz(reader: QuizReader, content_item_id: uuid.UUID) -> Quiz:
    """Fetch and validate the quiz for a content item.

    Raises ``NotFound`` when the item has no quiz and ``ValidationFailure``
    when the stored definition is malformed (e.g. a correct answer index
    outside its options), so a session can never start on a broken quiz.
    """
    raw = reader.get_quiz_by_content_item(content_item_id)
    if raw is None:
        raise NotFound(
            "Quiz not found", context={"content_item_id": str(content_item_id)}
        )
    try:
        return Quiz.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Malformed quiz for content item %s: %s", content_item_id, exc)
        raise ValidationFailure(
            "Malformed quiz definition",
            context={
                "content_item_id": str(content_item_id),
                "errors": [e["msg"] for e in exc.errors()],
            },
        ) from exc
