"""
Login-link and notification schemas
"""

from datetime import datetime
from typing import List
from pydantic import BaseModel, EmailStr, Field, field_validator

from eventrsvp.models.rsvp import RsvpStatus

class LoginLinkRequest(BaseModel):
    """Respondent asks for a sign-in link"""
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

class NotificationRequest(BaseModel):
    """Organizer-triggered email blast"""
    subject: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=5000)
    statuses: List[RsvpStatus] = Field(..., min_length=1)

    @field_validator("statuses")
    @classmethod
    def dedupe_statuses(cls, value: List[RsvpStatus]) -> List[RsvpStatus]:
        return list(dict.fromkeys(value))

class NotificationLog(BaseModel):
    """Audit record of a sent notification"""
    id: int
    subject: str
    body: str
    recipient_count: int
    sent_count: int
    failed_count: int
    sent_at: datetime

    class Config:
        from_attributes = True
