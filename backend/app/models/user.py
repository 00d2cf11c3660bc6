"""User ORM model: hosts and attendees."""
import enum
import uuid
from sqlalchemy import Column, String, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, UTCDateTime


class UserRole(str, enum.Enum):
    host = "HOST"
    attendee = "ATTENDEE"


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True)
    role = Column(
        SAEnum(UserRole, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.attendee,
    )
    timezone = Column(String(50), nullable=True)  # IANA tz
    created_at = Column(UTCDateTime, server_default=func.now())

    hosted_events = relationship("Event", back_populates="host", cascade="all, delete-orphan")
