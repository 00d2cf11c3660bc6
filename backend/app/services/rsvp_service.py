"""RSVP ledger and capacity guard.

Every invite/accept/cancel runs as one transaction. Acceptance is the only
path that consumes capacity, and it does so with a single conditional UPDATE
that recounts accepted rows in its own predicate, while the event row is
held FOR UPDATE. Concurrent acceptances for one event therefore serialize
and can never overbook.

Cancellation policy: an invitation that was never accepted is deleted
outright; an accepted one is flagged ``cancelled`` and keeps its acceptance
instant as history; cancelling twice is a conflict. There is no deadline
gate on cancellation.
"""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased, joinedload

from app.database import utcnow
from app.models.checkin import Checkin
from app.models.event import Event
from app.models.rsvp import InvalidTransition, RsvpAction, RsvpInvitation, RsvpStatus, transition
from app.models.user import User, UserRole
from app.services.event_service import check_ownership, get_event
from app.services.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


def user_summary(user: User) -> dict[str, Any]:
    return {
        "user_id": user.user_id,
        "name": user.name,
        "email": user.email,
        "timezone": user.timezone,
    }


def _get_owned_rsvp(db: Session, rsvp_id: str, user_id: str, lock: bool = False) -> RsvpInvitation:
    query = db.query(RsvpInvitation).filter(RsvpInvitation.rsvp_id == rsvp_id)
    if lock:
        query = query.with_for_update()
    rsvp = query.first()
    if not rsvp:
        raise NotFoundError("Invitation", rsvp_id)
    if rsvp.attendee_id != user_id:
        raise ForbiddenError("This invitation is not for you.")
    return rsvp


def invite_users(db: Session, event_id: str, attendee_ids: list[str]) -> list[RsvpInvitation]:
    """Create ``invited`` rows, or reset cancelled ones; returns the rows touched.

    Rows that are already invited or accepted are left as they are.
    """
    get_event(db, event_id)

    wanted = list(dict.fromkeys(attendee_ids))
    found = {uid for (uid,) in db.query(User.user_id).filter(User.user_id.in_(wanted))}
    missing = [uid for uid in wanted if uid not in found]
    if missing:
        raise InvalidArgumentError(f"Invalid user IDs: {', '.join(missing)}", invalid_ids=missing)

    existing = {
        row.attendee_id: row
        for row in db.query(RsvpInvitation).filter(
            RsvpInvitation.event_id == event_id,
            RsvpInvitation.attendee_id.in_(wanted),
        )
    }

    touched: list[RsvpInvitation] = []
    for uid in wanted:
        row = existing.get(uid)
        try:
            transition(row.status if row else None, RsvpAction.invite)
        except InvalidTransition:
            continue  # already invited or accepted
        if row is None:
            row = RsvpInvitation(event_id=event_id, attendee_id=uid, status=RsvpStatus.invited)
            db.add(row)
        else:
            row.status = RsvpStatus.invited
            row.rsvp_date = None
        touched.append(row)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Invitations for this event changed concurrently; retry the request")

    for row in touched:
        db.refresh(row)
    logger.info("Invited %d user(s) to event %s", len(touched), event_id)
    return touched


def accept_invitation(
    db: Session, rsvp_id: str, user_id: str, now: Optional[datetime] = None
) -> RsvpInvitation:
    """Accept an invitation, subject to the RSVP deadline and event capacity."""
    now = now or utcnow()
    rsvp = _get_owned_rsvp(db, rsvp_id, user_id)
    if rsvp.status == RsvpStatus.accepted:
        raise ConflictError("You have already confirmed your RSVP.")
    transition(rsvp.status, RsvpAction.accept)

    event = (
        db.query(Event)
        .filter(Event.event_id == rsvp.event_id)
        .with_for_update()
        .populate_existing()
        .one()
    )
    if now > event.rsvp_deadline:
        db.rollback()
        raise ConflictError("RSVP deadline has passed.")

    counted = aliased(RsvpInvitation)
    accepted_count = (
        select(func.count())
        .select_from(counted)
        .where(counted.event_id == event.event_id, counted.status == RsvpStatus.accepted)
        .scalar_subquery()
    )
    result = db.execute(
        update(RsvpInvitation)
        .where(
            RsvpInvitation.rsvp_id == rsvp_id,
            RsvpInvitation.status != RsvpStatus.accepted,
            accepted_count < event.max_attendees,
        )
        .values(status=RsvpStatus.accepted, rsvp_date=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        if rsvp.status == RsvpStatus.accepted:
            raise ConflictError("You have already confirmed your RSVP.")
        logger.info("Rejected RSVP %s: event %s is full", rsvp_id, event.event_id)
        raise ConflictError("Event is already full.")

    db.commit()
    db.refresh(rsvp)
    logger.info("User %s accepted RSVP %s for event %s", user_id, rsvp_id, rsvp.event_id)
    return rsvp


def cancel_invitation(db: Session, rsvp_id: str, user_id: str) -> Optional[RsvpInvitation]:
    """Cancel an invitation; returns None when the row was deleted."""
    rsvp = _get_owned_rsvp(db, rsvp_id, user_id, lock=True)
    try:
        next_status = transition(rsvp.status, RsvpAction.cancel)
    except InvalidTransition:
        db.rollback()
        raise ConflictError("You have already cancelled your RSVP.")

    if next_status is None:
        db.delete(rsvp)
        db.commit()
        logger.info("User %s declined RSVP %s; invitation removed", user_id, rsvp_id)
        return None

    rsvp.status = next_status
    db.commit()
    db.refresh(rsvp)
    logger.info("User %s cancelled accepted RSVP %s", user_id, rsvp_id)
    return rsvp


def list_invitations_for_user(db: Session, user_id: str) -> list[dict[str, Any]]:
    """Every ledger row for ``user_id``, newest first, with a checked-in flag."""
    rows = (
        db.query(RsvpInvitation)
        .options(joinedload(RsvpInvitation.event))
        .filter(RsvpInvitation.attendee_id == user_id)
        .order_by(RsvpInvitation.invited_at.desc())
        .all()
    )
    checked_in = {
        event_id
        for (event_id,) in db.query(Checkin.event_id).filter(
            Checkin.user_id == user_id,
            Checkin.is_walk_in.is_(False),
        )
    }
    return [
        {
            "rsvp_id": r.rsvp_id,
            "status": r.status,
            "invited_at": r.invited_at,
            "rsvp_date": r.rsvp_date,
            "checked_in": r.event_id in checked_in,
            "event": r.event,
        }
        for r in rows
    ]


def confirmed_rsvps_for_event(db: Session, event_id: str) -> list[RsvpInvitation]:
    get_event(db, event_id)
    return (
        db.query(RsvpInvitation)
        .options(joinedload(RsvpInvitation.attendee))
        .filter(RsvpInvitation.event_id == event_id, RsvpInvitation.status == RsvpStatus.accepted)
        .order_by(RsvpInvitation.rsvp_date)
        .all()
    )


def manage_event_invites(db: Session, event_id: str, host_id: str) -> list[dict[str, Any]]:
    """Ledger rows for the event plus every attendee-role user not yet invited."""
    event = get_event(db, event_id)
    check_ownership(event, host_id)

    rows = (
        db.query(RsvpInvitation)
        .options(joinedload(RsvpInvitation.attendee))
        .filter(RsvpInvitation.event_id == event_id)
        .order_by(RsvpInvitation.invited_at)
        .all()
    )
    entries: list[dict[str, Any]] = [
        {
            "status": r.status.value,
            "rsvp_id": r.rsvp_id,
            "invited_at": r.invited_at,
            "rsvp_date": r.rsvp_date,
            "user": user_summary(r.attendee),
        }
        for r in rows
    ]

    invited_ids = {r.attendee_id for r in rows}
    attendees = db.query(User).filter(User.role == UserRole.attendee).order_by(User.name).all()
    entries.extend(
        {"status": "uninvited", "user": user_summary(u)}
        for u in attendees
        if u.user_id not in invited_ids
    )
    return entries
