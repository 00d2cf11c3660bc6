"""ORM models; importing this package registers every table on Base.metadata."""
from app.models.user import User, UserRole  # noqa: F401
from app.models.event import Event, EventStatus  # noqa: F401
from app.models.rsvp import RsvpInvitation, RsvpStatus  # noqa: F401
from app.models.checkin import Checkin  # noqa: F401
from app.models.feedback import Feedback, FeedbackType  # noqa: F401
