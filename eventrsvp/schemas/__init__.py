"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .rsvp import *
from .auth import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventDetail",
    "PublicEventView",
    "RsvpCreate",
    "RsvpResponse",
    "ManagedRsvp",
    "LoginLinkRequest",
    "NotificationRequest",
    "NotificationLog",
]
