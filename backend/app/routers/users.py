"""User API routes."""
import logging
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.user import UserCreate, UserOut, UserUpdate
from app.services.exceptions import ConflictError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()


def _validate_timezone(tz: Optional[str]) -> None:
    if not tz:
        return
    try:
        pytz.timezone(tz)
    except pytz.UnknownTimeZoneError:
        raise InvalidArgumentError(f"Unknown timezone: {tz}")


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a host or attendee profile."""
    _validate_timezone(payload.timezone)
    if db.query(User).filter(User.email == payload.email).first():
        raise ConflictError(f"A user with email {payload.email} already exists")

    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created %s user %s (%s)", user.role.value, user.user_id, user.email)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return db.query(User).order_by(User.name).all()


@router.get("/me", response_model=UserOut)
def get_me(user: User = Depends(get_current_user)):
    return user


@router.put("/me", response_model=UserOut)
def update_me(payload: UserUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Update the caller's own name and/or timezone; email and role are fixed."""
    updates = payload.model_dump(exclude_unset=True)
    _validate_timezone(updates.get("timezone"))
    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("User %s updated profile (%s)", user.user_id, ", ".join(sorted(updates)) or "no fields")
    return user


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    return user
