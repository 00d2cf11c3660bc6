"""Caller identity and role gating.

Authentication itself lives outside this service; an upstream gateway puts
the authenticated user's id in the ``X-User-Id`` header.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.services.exceptions import ForbiddenError, UnauthenticatedError


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    if not x_user_id:
        raise UnauthenticatedError("Missing X-User-Id header")
    user = db.query(User).filter(User.user_id == x_user_id).first()
    if not user:
        raise UnauthenticatedError("Unknown user")
    return user


def require_role(*roles: UserRole):
    """Dependency factory: the caller must hold one of ``roles``."""

    def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return user

    return _check


require_host = require_role(UserRole.host)
require_attendee = require_role(UserRole.attendee)
