"""Event lifecycle engine: time-driven status sweeps.

Status only ever moves forward: SCHEDULED -> LIVE -> CLOSED. Transition
decisions are made by ``next_status``, a pure function of the event and an
instant, so sweeps can be driven by the scheduler or invoked directly.

Each sweep commits event by event; a failure persisting one event is logged
and the sweep carries on with the remaining candidates.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import utcnow
from app.models.event import Event, EventStatus

logger = logging.getLogger(__name__)

# Position of each status along the only allowed path.
_ORDER = {EventStatus.scheduled: 0, EventStatus.live: 1, EventStatus.closed: 2}


def close_after() -> timedelta:
    return timedelta(minutes=settings.EVENT_CLOSE_AFTER_MINUTES)


def next_status(event: Event, now: datetime, closes_after: Optional[timedelta] = None) -> EventStatus:
    """Return the status ``event`` should hold at ``now``.

    Advances at most one step per call, so a SCHEDULED event well past its
    close time goes LIVE first and closes on the following sweep.
    """
    closes_after = closes_after if closes_after is not None else close_after()
    if event.status == EventStatus.scheduled and event.start_date_time <= now:
        return EventStatus.live
    if event.status == EventStatus.live and now >= event.start_date_time + closes_after:
        return EventStatus.closed
    return event.status


def is_forward(current: EventStatus, target: EventStatus) -> bool:
    return _ORDER[target] > _ORDER[current]


def advance(event: Event, target: EventStatus) -> bool:
    """Move ``event`` to ``target`` if that is a forward step; returns whether it moved.

    Check-in is open while LIVE and shut once CLOSED.
    """
    if not is_forward(event.status, target):
        return False
    event.status = target
    if target == EventStatus.live:
        event.check_in_enabled = True
    elif target == EventStatus.closed:
        event.check_in_enabled = False
    return True


def utc_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of ``now``'s UTC calendar day."""
    now = now.astimezone(timezone.utc)
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def starts_today(start: datetime, now: datetime) -> bool:
    day_start, day_end = utc_day_bounds(now)
    return day_start <= start < day_end


def _apply_each(db: Session, events: list[Event], mutate: Callable[[Event], None], label: str) -> int:
    """Mutate and commit each event separately; return how many were saved."""
    saved = 0
    for ev in events:
        event_id = ev.event_id
        try:
            mutate(ev)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("%s sweep failed to persist event %s, continuing", label, event_id)
            continue
        saved += 1
        logger.info("Event %s: status=%s check_in_enabled=%s", event_id, ev.status.value, ev.check_in_enabled)
    return saved


def activate_due_events(db: Session, now: Optional[datetime] = None) -> int:
    """Activate sweep: SCHEDULED events whose start has arrived become LIVE."""
    now = now or utcnow()
    candidates = (
        db.query(Event)
        .filter(Event.status == EventStatus.scheduled, Event.start_date_time <= now)
        .all()
    )
    if candidates:
        logger.info("Marking %d event(s) as LIVE", len(candidates))

    def _activate(ev: Event) -> None:
        if next_status(ev, now) == EventStatus.live:
            advance(ev, EventStatus.live)

    return _apply_each(db, candidates, _activate, "activate")


def close_finished_events(db: Session, now: Optional[datetime] = None) -> int:
    """Close sweep: LIVE events past start + close duration become CLOSED."""
    now = now or utcnow()
    closes_after = close_after()
    due = [
        ev for ev in db.query(Event).filter(Event.status == EventStatus.live).all()
        if next_status(ev, now, closes_after) == EventStatus.closed
    ]
    if due:
        logger.info("Closing %d event(s)", len(due))

    def _close(ev: Event) -> None:
        advance(ev, EventStatus.closed)

    return _apply_each(db, due, _close, "close")


def enable_todays_check_ins(db: Session, now: Optional[datetime] = None) -> int:
    """Daily sweep: open check-in for every event starting on the current UTC day."""
    now = now or utcnow()
    day_start, day_end = utc_day_bounds(now)
    todays = (
        db.query(Event)
        .filter(
            Event.start_date_time >= day_start,
            Event.start_date_time < day_end,
            Event.check_in_enabled.is_(False),
        )
        .all()
    )
    if todays:
        logger.info("Enabling check-in for %d event(s) today", len(todays))

    def _enable(ev: Event) -> None:
        ev.check_in_enabled = True

    return _apply_each(db, todays, _enable, "enable-check-in")
