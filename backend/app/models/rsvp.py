"""RsvpInvitation ORM model: one ledger row per (event, attendee)."""
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base, UTCDateTime, utcnow


class RsvpStatus(str, enum.Enum):
    invited = "invited"
    accepted = "accepted"
    cancelled = "cancelled"


class RsvpAction(str, enum.Enum):
    invite = "invite"
    accept = "accept"
    cancel = "cancel"


# (current status, action) -> next status. None as current means "no row yet";
# None as next status means the row is removed.
TRANSITIONS: dict[tuple, "RsvpStatus | None"] = {
    (None, RsvpAction.invite): RsvpStatus.invited,
    (RsvpStatus.cancelled, RsvpAction.invite): RsvpStatus.invited,
    (RsvpStatus.invited, RsvpAction.accept): RsvpStatus.accepted,
    (RsvpStatus.cancelled, RsvpAction.accept): RsvpStatus.accepted,
    (RsvpStatus.invited, RsvpAction.cancel): None,
    (RsvpStatus.accepted, RsvpAction.cancel): RsvpStatus.cancelled,
}


class InvalidTransition(Exception):
    def __init__(self, current, action):
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action.value} an RSVP that is {current.value if current else 'absent'}")


def transition(current: "RsvpStatus | None", action: RsvpAction) -> "RsvpStatus | None":
    """Return the status reached by applying ``action`` to ``current``."""
    key = (current, action)
    if key not in TRANSITIONS:
        raise InvalidTransition(current, action)
    return TRANSITIONS[key]


class RsvpInvitation(Base):
    __tablename__ = "rsvps"
    __table_args__ = (
        UniqueConstraint("event_id", "attendee_id", name="uq_rsvps_event_attendee"),
    )

    rsvp_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    attendee_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        SAEnum(RsvpStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RsvpStatus.invited,
    )
    invited_at = Column(UTCDateTime, nullable=False, default=utcnow)
    rsvp_date = Column(UTCDateTime, nullable=True)  # acceptance instant
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="rsvps")
    attendee = relationship("User")

    @property
    def confirmed(self) -> bool:
        return self.status == RsvpStatus.accepted

    @property
    def cancelled(self) -> bool:
        return self.status == RsvpStatus.cancelled
