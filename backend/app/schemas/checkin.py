"""Pydantic schemas for Check-ins."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


class WalkInCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=100)


class CheckinOut(BaseModel):
    checkin_id: str
    event_id: str
    user_id: Optional[str] = None
    is_walk_in: bool
    walk_in_name: Optional[str] = None
    walk_in_email: Optional[str] = None
    checkin_time: datetime
    user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}
