"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.models.user import UserRole


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=100)
    role: UserRole = UserRole.attendee
    timezone: Optional[str] = None


class UserUpdate(BaseModel):
    """Profile fields a user may change about themselves."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    timezone: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("name", "timezone")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class UserOut(BaseModel):
    user_id: str
    name: str
    email: str
    role: UserRole
    timezone: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    user_id: str
    name: str
    email: str
    timezone: Optional[str] = None

    model_config = {"from_attributes": True}
