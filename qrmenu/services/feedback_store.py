"""
Visitor feedback inbox, kept in the local cache only
"""

from typing import Any, List, Mapping, Optional, Union
import pydantic
import structlog

from qrmenu.core.errors import NotFoundError, ValidationError
from qrmenu.models.feedback import Feedback, FeedbackCreate
from qrmenu.services.local_cache import LocalCache

logger = structlog.get_logger(__name__)


def feedback_cache_key(slug: str) -> str:
    return f"feedbacks_{slug}"


class FeedbackStore:
    """Per-tenant feedback collection, newest first"""

    def __init__(self, slug: str, cache: Optional[LocalCache] = None):
        self.slug = slug
        self.cache = cache
        self.feedbacks: List[Feedback] = []

    @property
    def cache_key(self) -> str:
        return feedback_cache_key(self.slug)

    def load(self) -> List[Feedback]:
        self.feedbacks = []
        if self.cache is None:
            return self.feedbacks
        raw = self.cache.read(self.cache_key)
        if not raw:
            return self.feedbacks
        try:
            self.feedbacks = [Feedback.model_validate(item) for item in raw.get("feedbacks", [])]
        except pydantic.ValidationError as e:
            logger.error(f"Failed to load feedbacks for {self.slug}: {e.error_count()} errors")
            self.feedbacks = []
        return self.feedbacks

    def _save(self):
        if self.cache is None:
            return
        payload = {"feedbacks": [f.model_dump(mode="json") for f in self.feedbacks]}
        if not self.cache.write(self.cache_key, payload):
            logger.error(f"Failed to save feedbacks for {self.slug}")

    def add(self, data: Union[FeedbackCreate, Mapping[str, Any]]) -> Feedback:
        if isinstance(data, FeedbackCreate):
            data = data.model_dump()
        try:
            payload = FeedbackCreate.model_validate(data)
        except pydantic.ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or None
            raise ValidationError(f"Invalid {field}: {error['msg']}", field=field) from e
        if not payload.author.strip():
            raise ValidationError("Author is required", field="author")

        feedback = Feedback(**payload.model_dump())
        self.feedbacks = [feedback, *self.feedbacks]
        self._save()
        logger.info(f"Feedback {feedback.id} received for {self.slug}", rating=feedback.rating)
        return feedback

    def get(self, feedback_id: str) -> Feedback:
        for feedback in self.feedbacks:
            if feedback.id == feedback_id:
                return feedback
        raise NotFoundError(f"Feedback {feedback_id} not found")

    def mark_as_read(self, feedback_id: str) -> Feedback:
        updated = self.get(feedback_id).model_copy(update={"is_read": True})
        self.feedbacks = [updated if f.id == feedback_id else f for f in self.feedbacks]
        self._save()
        return updated

    def delete(self, feedback_id: str):
        self.get(feedback_id)
        self.feedbacks = [f for f in self.feedbacks if f.id != feedback_id]
        self._save()

    def delete_all(self) -> int:
        count = len(self.feedbacks)
        self.feedbacks = []
        self._save()
        return count

    def rename(self, new_slug: str):
        """Move the collection to a tenant's new slug"""
        if new_slug == self.slug:
            return
        if self.cache is not None:
            self.cache.delete(self.cache_key)
        self.slug = new_slug
        self._save()

    @property
    def unread_count(self) -> int:
        return sum(1 for f in self.feedbacks if not f.is_read)

    def average_rating(self) -> Optional[float]:
        if not self.feedbacks:
            return None
        return round(sum(f.rating for f in self.feedbacks) / len(self.feedbacks), 1)
