"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.models.event import EventStatus


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    start_date_time: datetime
    rsvp_deadline: datetime
    max_attendees: int = Field(gt=0)
    is_virtual: bool = False
    location: Optional[str] = Field(None, max_length=300)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date_time: Optional[datetime] = None
    rsvp_deadline: Optional[datetime] = None
    max_attendees: Optional[int] = Field(None, gt=0)
    is_virtual: Optional[bool] = None
    location: Optional[str] = Field(None, max_length=300)

    @field_validator("title", "start_date_time", "rsvp_deadline", "max_attendees", "is_virtual")
    @classmethod
    def not_null(cls, v, info):
        # Omit a field to leave it unchanged; these columns cannot be cleared.
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class EventOut(BaseModel):
    event_id: str
    host_id: str
    title: str
    description: Optional[str] = None
    start_date_time: datetime
    rsvp_deadline: datetime
    max_attendees: int
    is_virtual: bool
    location: Optional[str] = None
    status: EventStatus
    check_in_enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventSummary(BaseModel):
    event_id: str
    title: str
    start_date_time: datetime
    rsvp_deadline: datetime
    is_virtual: bool
    location: Optional[str] = None
    status: EventStatus

    model_config = {"from_attributes": True}
