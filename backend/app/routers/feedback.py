"""Live feedback API routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.auth import get_current_user, require_attendee, require_host
from app.database import get_db
from app.models.feedback import FeedbackType
from app.models.user import User
from app.schemas.feedback import FeedbackCreate, FeedbackOut
from app.services import feedback_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{event_id}", response_model=FeedbackOut, status_code=status.HTTP_201_CREATED)
def create_feedback(
    event_id: str,
    payload: FeedbackCreate,
    user: User = Depends(require_attendee),
    db: Session = Depends(get_db),
):
    """Attendee reaction or comment; only accepted while the event is LIVE."""
    return feedback_service.create_feedback(
        db, user.user_id, event_id, comment=payload.comment, emoji=payload.emoji
    )


@router.patch("/{event_id}/{feedback_id}/pin", response_model=FeedbackOut)
def pin_feedback(event_id: str, feedback_id: str, host: User = Depends(require_host), db: Session = Depends(get_db)):
    return feedback_service.pin_feedback(db, event_id, feedback_id, host.user_id)


@router.patch("/{event_id}/{feedback_id}/flag", response_model=FeedbackOut)
def flag_feedback(event_id: str, feedback_id: str, host: User = Depends(require_host), db: Session = Depends(get_db)):
    return feedback_service.flag_feedback(db, event_id, feedback_id, host.user_id)


@router.get("/{event_id}", response_model=list[FeedbackOut])
def list_feedback(
    event_id: str,
    type: Optional[FeedbackType] = Query(None),
    _: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Newest first; ``?type=EMOJI`` or ``?type=TEXT`` narrows the list."""
    return feedback_service.list_feedback(db, event_id, type)
