"""RSVP API routes: invitations, acceptance and cancellation."""
import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.auth import get_current_user, require_attendee, require_host
from app.database import get_db
from app.models.user import User
from app.schemas.rsvp import ConfirmedRsvpOut, InvitationCreate, ManageEntry, MyInvitationOut, RsvpOut
from app.services import rsvp_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/invite", response_model=list[RsvpOut], status_code=status.HTTP_201_CREATED)
def invite_users(payload: InvitationCreate, _: User = Depends(require_host), db: Session = Depends(get_db)):
    """Host invites attendees; returns the invitations created or re-opened."""
    return rsvp_service.invite_users(db, payload.event_id, payload.attendee_ids)


@router.get("/me", response_model=list[MyInvitationOut])
def my_invitations(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """All of the caller's invitations, with check-in state."""
    return rsvp_service.list_invitations_for_user(db, user.user_id)


@router.patch("/{rsvp_id}/accept", response_model=RsvpOut)
def accept_invitation(rsvp_id: str, user: User = Depends(require_attendee), db: Session = Depends(get_db)):
    return rsvp_service.accept_invitation(db, rsvp_id, user.user_id)


@router.delete("/{rsvp_id}", response_model=None)
def cancel_invitation(rsvp_id: str, user: User = Depends(require_attendee), db: Session = Depends(get_db)):
    """Cancel; 204 when a never-accepted invitation is removed, else the flagged row."""
    rsvp = rsvp_service.cancel_invitation(db, rsvp_id, user.user_id)
    if rsvp is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return RsvpOut.model_validate(rsvp)


@router.get("/event/{event_id}/confirmed", response_model=list[ConfirmedRsvpOut])
def confirmed_for_event(event_id: str, _: User = Depends(require_host), db: Session = Depends(get_db)):
    return rsvp_service.confirmed_rsvps_for_event(db, event_id)


@router.get("/event/{event_id}", response_model=list[ManageEntry])
def manage_event_invites(event_id: str, host: User = Depends(require_host), db: Session = Depends(get_db)):
    """Invited / accepted / cancelled / uninvited view for the owning host."""
    return rsvp_service.manage_event_invites(db, event_id, host.user_id)
