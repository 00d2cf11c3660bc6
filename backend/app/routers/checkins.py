"""Check-in API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import require_attendee, require_host
from app.database import get_db
from app.models.user import User
from app.schemas.checkin import CheckinOut, WalkInCreate
from app.services import checkin_service, event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{event_id}", response_model=CheckinOut, status_code=status.HTTP_201_CREATED)
def check_in(event_id: str, user: User = Depends(require_attendee), db: Session = Depends(get_db)):
    """Attendee self check-in."""
    return checkin_service.self_check_in(db, user.user_id, event_id)


@router.post("/{event_id}/walk-in", response_model=CheckinOut, status_code=status.HTTP_201_CREATED)
def walk_in(
    event_id: str,
    payload: WalkInCreate,
    host: User = Depends(require_host),
    db: Session = Depends(get_db),
):
    """Host admits a walk-in without an RSVP."""
    event_service.check_ownership(event_service.get_event(db, event_id), host.user_id)
    return checkin_service.add_walk_in(db, event_id, name=payload.name, email=payload.email)


@router.get("/{event_id}", response_model=list[CheckinOut])
def list_checkins(event_id: str, _: User = Depends(require_host), db: Session = Depends(get_db)):
    return checkin_service.list_checkins(db, event_id)
