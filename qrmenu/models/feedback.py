"""
Visitor feedback model
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional
import uuid


def new_feedback_id() -> str:
    return f"fb-{uuid.uuid4().hex}"


class FeedbackScores(BaseModel):
    """Sub-scores per aspect of the visit"""
    food: int = Field(default=5, ge=1, le=5)
    service: int = Field(default=5, ge=1, le=5)
    ambiance: int = Field(default=5, ge=1, le=5)


class FeedbackCreate(BaseModel):
    """Feedback submitted by a public visitor"""
    author: str
    phone: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    categories: FeedbackScores = Field(default_factory=FeedbackScores)
    comment: str = ""
    would_recommend: bool = True


class Feedback(FeedbackCreate):
    """Stored feedback entry"""
    id: str = Field(default_factory=new_feedback_id)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_read: bool = False
