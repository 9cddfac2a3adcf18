"""
Database models package
"""

from .organizer import Organizer
from .event import Event
from .rsvp import Rsvp, RsvpStatus
from .rsvp_user import RsvpUser, VerificationToken
from .notification import EmailNotification

__all__ = [
    "Organizer",
    "Event",
    "Rsvp",
    "RsvpStatus",
    "RsvpUser",
    "VerificationToken",
    "EmailNotification",
]
