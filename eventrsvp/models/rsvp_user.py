"""
Verified respondent identity and its login tokens
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from eventrsvp.core.db import Base

class RsvpUser(Base):
    __tablename__ = "rsvp_users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    email_verified = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    rsvps = relationship("Rsvp", back_populates="rsvp_user")
    tokens = relationship("VerificationToken", back_populates="rsvp_user", cascade="all, delete-orphan")

class VerificationToken(Base):
    __tablename__ = "verification_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(128), unique=True, nullable=False, index=True)
    expires = Column(DateTime, nullable=False)
    rsvp_user_id = Column(Integer, ForeignKey("rsvp_users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    rsvp_user = relationship("RsvpUser", back_populates="tokens")

    def is_expired(self, now: datetime = None) -> bool:
        return self.expires < (now or datetime.utcnow())
