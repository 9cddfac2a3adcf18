"""
Email notification audit log
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from eventrsvp.core.db import Base

class EmailNotification(Base):
    __tablename__ = "email_notifications"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    recipient_count = Column(Integer, nullable=False)
    sent_count = Column(Integer, nullable=False)
    failed_count = Column(Integer, nullable=False, default=0)
    sent_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    event = relationship("Event", back_populates="notifications")
