"""Event API routes: delegates to event_service for ownership and timing rules."""
import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.auth import get_current_user, require_host
from app.database import get_db
from app.models.user import User
from app.schemas.event import EventCreate, EventUpdate, EventOut
from app.services import event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, host: User = Depends(require_host), db: Session = Depends(get_db)):
    """Create a new event owned by the calling host."""
    return event_service.create_event(db=db, host_id=host.user_id, **payload.model_dump())


@router.get("/mine", response_model=list[EventOut])
def list_my_events(host: User = Depends(require_host), db: Session = Depends(get_db)):
    """Events hosted by the caller, soonest first."""
    return event_service.list_hosted_events(db, host.user_id)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, _: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return event_service.get_event(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    host: User = Depends(require_host),
    db: Session = Depends(get_db),
):
    """Partial update (owning host only)."""
    return event_service.update_event(
        db=db,
        event_id=event_id,
        actor_user_id=host.user_id,
        updates=payload.model_dump(exclude_unset=True),
    )


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, host: User = Depends(require_host), db: Session = Depends(get_db)):
    event_service.delete_event(db, event_id, host.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{event_id}/close", response_model=EventOut)
def close_event(event_id: str, host: User = Depends(require_host), db: Session = Depends(get_db)):
    """Close an event ahead of the lifecycle sweep."""
    return event_service.close_event(db, event_id, host.user_id)
