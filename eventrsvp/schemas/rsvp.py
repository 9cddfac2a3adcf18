"""
RSVP-related Pydantic schemas
"""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

from eventrsvp.models.rsvp import RsvpStatus

LETTER_RE = re.compile(r"^[A-Za-z]$")

class RsvpCreate(BaseModel):
    """Respondent form data"""
    first_name: str
    last_initial: str
    email: Optional[EmailStr] = None
    status: RsvpStatus

    @field_validator("first_name")
    @classmethod
    def clean_first_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("First name is required")
        if len(value) > 50:
            raise ValueError("First name must be 50 characters or less")
        return value

    @field_validator("last_initial")
    @classmethod
    def clean_last_initial(cls, value: str) -> str:
        value = value.strip()
        if len(value) != 1:
            raise ValueError("Last initial must be one character")
        if not LETTER_RE.match(value):
            raise ValueError("Must be a letter")
        return value.upper()

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else None

class RsvpResponse(BaseModel):
    """RSVP as shown to the organizer or the respondent"""
    id: int
    event_id: int
    first_name: str
    last_initial: str
    email: Optional[str] = None
    status: RsvpStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ManagedRsvp(BaseModel):
    """A verified respondent's RSVP with its event summary"""
    id: int
    status: RsvpStatus
    first_name: str
    last_initial: str
    event_id: int
    event_title: str
    event_slug: str
    event_date_time: datetime
    event_location: str
