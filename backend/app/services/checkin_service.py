"""Check-in gate: self check-ins for confirmed attendees, walk-ins for hosts."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.database import utcnow
from app.models.checkin import Checkin
from app.models.event import EventStatus
from app.models.rsvp import RsvpInvitation, RsvpStatus
from app.services.event_service import get_event
from app.services.exceptions import ConflictError, InvalidStateError

logger = logging.getLogger(__name__)


def self_check_in(db: Session, user_id: str, event_id: str, now: Optional[datetime] = None) -> Checkin:
    """Check an attendee in; requires a started event and an accepted RSVP."""
    now = now or utcnow()
    event = get_event(db, event_id)
    if now < event.start_date_time:
        raise InvalidStateError("Check-in is not open yet.")
    if event.status == EventStatus.closed:
        raise InvalidStateError("Check-in has closed for this event.")

    has_rsvp = (
        db.query(RsvpInvitation.rsvp_id)
        .filter(
            RsvpInvitation.event_id == event_id,
            RsvpInvitation.attendee_id == user_id,
            RsvpInvitation.status == RsvpStatus.accepted,
        )
        .first()
    )
    if not has_rsvp:
        raise InvalidStateError("No confirmed RSVP found.")

    existing = (
        db.query(Checkin.checkin_id)
        .filter(Checkin.event_id == event_id, Checkin.user_id == user_id, Checkin.is_walk_in.is_(False))
        .first()
    )
    if existing:
        raise ConflictError("Already checked in.")

    checkin = Checkin(event_id=event_id, user_id=user_id, is_walk_in=False, checkin_time=now)
    db.add(checkin)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Already checked in.")
    db.refresh(checkin)
    logger.info("User %s checked in to event %s", user_id, event_id)
    return checkin


def add_walk_in(
    db: Session,
    event_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Checkin:
    """Record a host-admitted walk-in; never linked to a user, never deduplicated."""
    get_event(db, event_id)
    checkin = Checkin(
        event_id=event_id,
        user_id=None,
        is_walk_in=True,
        walk_in_name=name,
        walk_in_email=email,
        checkin_time=now or utcnow(),
    )
    db.add(checkin)
    db.commit()
    db.refresh(checkin)
    logger.info("Walk-in %s added to event %s", checkin.checkin_id, event_id)
    return checkin


def list_checkins(db: Session, event_id: str) -> list[Checkin]:
    get_event(db, event_id)
    return (
        db.query(Checkin)
        .options(joinedload(Checkin.user))
        .filter(Checkin.event_id == event_id)
        .order_by(Checkin.checkin_time)
        .all()
    )
