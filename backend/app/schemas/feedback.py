"""Pydantic schemas for live Feedback."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from app.models.feedback import FeedbackType


class FeedbackCreate(BaseModel):
    """Send either an emoji or a text comment; the emoji wins if both are given."""

    comment: Optional[str] = Field(None, max_length=2000)
    emoji: Optional[str] = Field(None, max_length=32)

    @model_validator(mode="after")
    def has_content(self):
        if not (self.emoji or self.comment):
            raise ValueError("Provide an emoji or a comment")
        return self


class FeedbackOut(BaseModel):
    feedback_id: str
    event_id: str
    user_id: Optional[str] = None
    type: FeedbackType
    content: str
    pinned: bool
    flagged: bool
    created_at: datetime

    model_config = {"from_attributes": True}
