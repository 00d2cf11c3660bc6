"""Event service: host-owned event CRUD and the explicit close action.

Responsibilities:
- Authorization hook: only the owning host may update, delete or close
- Timing validation: RSVP deadline may not fall after the event start
- Check-in pre-opening for events created on the day they start
- Status is never written here except by ``close_event``; the lifecycle
  sweeps own every other transition
"""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.database import as_utc, utcnow
from app.models.event import Event, EventStatus
from app.services.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError
from app.services.lifecycle_service import advance, starts_today

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "start_date_time",
    "rsvp_deadline",
    "max_attendees",
    "is_virtual",
    "location",
)

# Columns a partial update may not clear.
REQUIRED_FIELDS = frozenset({"title", "start_date_time", "rsvp_deadline", "max_attendees", "is_virtual"})


def get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFoundError("Event", event_id)
    return event


def check_ownership(event: Event, actor_user_id: str) -> None:
    """Only the host who created the event may manage it."""
    if event.host_id != actor_user_id:
        raise ForbiddenError("You are not the host of this event.")


def _validate_timing(start: datetime, deadline: datetime) -> None:
    if deadline > start:
        raise InvalidArgumentError("rsvp_deadline must not be later than start_date_time")


def create_event(
    db: Session,
    host_id: str,
    title: str,
    start_date_time: datetime,
    rsvp_deadline: datetime,
    max_attendees: int,
    description: Optional[str] = None,
    is_virtual: bool = False,
    location: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Event:
    """Create a SCHEDULED event; check-in opens straight away if it starts today (UTC)."""
    start = as_utc(start_date_time)
    deadline = as_utc(rsvp_deadline)
    _validate_timing(start, deadline)

    event = Event(
        host_id=host_id,
        title=title,
        description=description,
        start_date_time=start,
        rsvp_deadline=deadline,
        max_attendees=max_attendees,
        is_virtual=is_virtual,
        location=location,
        status=EventStatus.scheduled,
        check_in_enabled=starts_today(start, now or utcnow()),
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by host %s", title, event.event_id, host_id)
    return event


def list_hosted_events(db: Session, host_id: str) -> list[Event]:
    return (
        db.query(Event)
        .filter(Event.host_id == host_id)
        .order_by(Event.start_date_time)
        .all()
    )


def update_event(db: Session, event_id: str, actor_user_id: str, updates: dict[str, Any]) -> Event:
    """Partial update of descriptive, timing and capacity fields."""
    event = get_event(db, event_id)
    check_ownership(event, actor_user_id)

    for field, value in updates.items():
        if field not in UPDATABLE_FIELDS:
            continue
        if value is None and field in REQUIRED_FIELDS:
            db.rollback()
            raise InvalidArgumentError(f"{field} cannot be null")
        if field in ("start_date_time", "rsvp_deadline"):
            value = as_utc(value)
        setattr(event, field, value)
    try:
        _validate_timing(event.start_date_time, event.rsvp_deadline)
    except InvalidArgumentError:
        db.rollback()
        raise

    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s)", event_id, ", ".join(sorted(updates)) or "no fields")
    return event


def delete_event(db: Session, event_id: str, actor_user_id: str) -> None:
    """Delete an event along with its ledger rows and check-ins."""
    event = get_event(db, event_id)
    check_ownership(event, actor_user_id)
    db.delete(event)
    db.commit()
    logger.info("Deleted event %s", event_id)


def close_event(db: Session, event_id: str, actor_user_id: str) -> Event:
    """Explicit host close: any non-closed event goes straight to CLOSED."""
    event = get_event(db, event_id)
    check_ownership(event, actor_user_id)
    if not advance(event, EventStatus.closed):
        raise ConflictError("Event is already closed")
    db.commit()
    db.refresh(event)
    logger.info("Event %s closed by host %s", event_id, actor_user_id)
    return event
