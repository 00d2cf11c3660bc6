"""Checkin ORM model: self check-ins and anonymous walk-ins."""
import uuid
from sqlalchemy import Column, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base, UTCDateTime, utcnow


class Checkin(Base):
    __tablename__ = "checkins"
    __table_args__ = (
        # Walk-ins carry a NULL user_id, so only self check-ins are constrained.
        UniqueConstraint("event_id", "user_id", name="uq_checkins_event_user"),
    )

    checkin_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    is_walk_in = Column(Boolean, nullable=False, default=False)
    walk_in_name = Column(String(100), nullable=True)
    walk_in_email = Column(String(100), nullable=True)
    checkin_time = Column(UTCDateTime, nullable=False, default=utcnow)

    event = relationship("Event", back_populates="checkins")
    user = relationship("User")
