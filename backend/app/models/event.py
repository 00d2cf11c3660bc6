"""Event ORM model: hosted events and their lifecycle state."""
import uuid
import enum
from sqlalchemy import Column, String, Text, Boolean, Integer, ForeignKey, CheckConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base, UTCDateTime


class EventStatus(str, enum.Enum):
    scheduled = "SCHEDULED"
    live = "LIVE"
    closed = "CLOSED"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("max_attendees > 0", name="ck_events_max_attendees_positive"),
    )

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    host_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date_time = Column(UTCDateTime, nullable=False, index=True)
    rsvp_deadline = Column(UTCDateTime, nullable=False)
    max_attendees = Column(Integer, nullable=False)
    is_virtual = Column(Boolean, nullable=False, default=False)
    location = Column(String(300), nullable=True)  # address, or URL when virtual
    status = Column(
        SAEnum(EventStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EventStatus.scheduled,
        index=True,
    )
    check_in_enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    host = relationship("User", back_populates="hosted_events")
    rsvps = relationship("RsvpInvitation", back_populates="event", cascade="all, delete-orphan")
    checkins = relationship("Checkin", back_populates="event", cascade="all, delete-orphan")
    feedbacks = relationship("Feedback", back_populates="event", cascade="all, delete-orphan")
