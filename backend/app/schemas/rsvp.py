"""Pydantic schemas for RSVP invitations."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from app.models.rsvp import RsvpStatus
from app.schemas.event import EventSummary
from app.schemas.user import UserSummary


class InvitationCreate(BaseModel):
    event_id: str
    attendee_ids: list[str] = Field(min_length=1)


class RsvpOut(BaseModel):
    rsvp_id: str
    event_id: str
    attendee_id: str
    status: RsvpStatus
    confirmed: bool
    cancelled: bool
    invited_at: datetime
    rsvp_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ConfirmedRsvpOut(RsvpOut):
    attendee: UserSummary


class MyInvitationOut(BaseModel):
    rsvp_id: str
    status: RsvpStatus
    invited_at: datetime
    rsvp_date: Optional[datetime] = None
    checked_in: bool
    event: EventSummary

    model_config = {"from_attributes": True}


class ManageEntry(BaseModel):
    """One row of the host's invite-management view."""

    status: Literal["invited", "accepted", "cancelled", "uninvited"]
    rsvp_id: Optional[str] = None
    invited_at: Optional[datetime] = None
    rsvp_date: Optional[datetime] = None
    user: UserSummary
