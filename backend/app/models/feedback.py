"""Feedback ORM model: emoji reactions and text comments sent during a live event."""
import enum
import uuid
from sqlalchemy import Column, String, Text, Boolean, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from app.database import Base, UTCDateTime, utcnow


class FeedbackType(str, enum.Enum):
    emoji = "EMOJI"
    text = "TEXT"


class Feedback(Base):
    __tablename__ = "feedbacks"

    feedback_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)
    type = Column(
        SAEnum(FeedbackType, native_enum=False, length=10, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=FeedbackType.text,
    )
    content = Column(Text, nullable=False)  # the emoji itself, or the comment
    pinned = Column(Boolean, nullable=False, default=False)
    flagged = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)

    event = relationship("Event", back_populates="feedbacks")
    user = relationship("User")
