"""Live feedback: attendees post while an event is LIVE, the host pins or flags."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import utcnow
from app.models.event import EventStatus
from app.models.feedback import Feedback, FeedbackType
from app.services.event_service import check_ownership, get_event
from app.services.exceptions import InvalidStateError, NotFoundError

logger = logging.getLogger(__name__)


def create_feedback(
    db: Session,
    user_id: str,
    event_id: str,
    comment: Optional[str] = None,
    emoji: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Feedback:
    event = get_event(db, event_id)
    if event.status != EventStatus.live:
        raise InvalidStateError("Event is not live.")

    fb_type = FeedbackType.emoji if emoji else FeedbackType.text
    feedback = Feedback(
        event_id=event_id,
        user_id=user_id,
        type=fb_type,
        content=emoji or comment,
        created_at=now or utcnow(),
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)
    logger.info("User %s left %s feedback on event %s", user_id, fb_type.value, event_id)
    return feedback


def _get_feedback_for_host(db: Session, event_id: str, feedback_id: str, host_id: str) -> Feedback:
    feedback = (
        db.query(Feedback)
        .filter(Feedback.feedback_id == feedback_id, Feedback.event_id == event_id)
        .first()
    )
    if not feedback:
        raise NotFoundError("Feedback", feedback_id)
    check_ownership(feedback.event, host_id)
    return feedback


def pin_feedback(db: Session, event_id: str, feedback_id: str, host_id: str) -> Feedback:
    feedback = _get_feedback_for_host(db, event_id, feedback_id, host_id)
    feedback.pinned = True
    db.commit()
    db.refresh(feedback)
    logger.info("Host %s pinned feedback %s", host_id, feedback_id)
    return feedback


def flag_feedback(db: Session, event_id: str, feedback_id: str, host_id: str) -> Feedback:
    feedback = _get_feedback_for_host(db, event_id, feedback_id, host_id)
    feedback.flagged = True
    db.commit()
    db.refresh(feedback)
    logger.info("Host %s flagged feedback %s", host_id, feedback_id)
    return feedback


def list_feedback(db: Session, event_id: str, fb_type: Optional[FeedbackType] = None) -> list[Feedback]:
    """Feedback for an event, newest first, optionally only one type."""
    get_event(db, event_id)
    query = db.query(Feedback).filter(Feedback.event_id == event_id)
    if fb_type is not None:
        query = query.filter(Feedback.type == fb_type)
    return query.order_by(Feedback.created_at.desc()).all()
