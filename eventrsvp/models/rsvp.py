"""
RSVP model
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from eventrsvp.core.db import Base

SESSION_TOKEN_LENGTH = 64

class RsvpStatus(str, enum.Enum):
    GOING = "GOING"
    MAYBE = "MAYBE"
    INTERESTED_IN_FUTURE = "INTERESTED_IN_FUTURE"
    NOT_GOING = "NOT_GOING"

class Rsvp(Base):
    __tablename__ = "rsvps"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(50), nullable=False)
    last_initial = Column(String(1), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    status = Column(Enum(RsvpStatus, name="rsvp_status"), nullable=False)
    session_token = Column(String(SESSION_TOKEN_LENGTH), nullable=False)
    rsvp_user_id = Column(Integer, ForeignKey("rsvp_users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="rsvps")
    rsvp_user = relationship("RsvpUser", back_populates="rsvps")

    # Both identity axes are unique per event; NULL emails never collide
    __table_args__ = (
        UniqueConstraint("event_id", "session_token", name="uq_rsvps_event_session"),
        UniqueConstraint("event_id", "email", name="uq_rsvps_event_email"),
    )
