"""
Event model
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from eventrsvp.core.db import Base

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(32), unique=True, nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    date_time = Column(DateTime, nullable=False)
    location = Column(String(200), nullable=False)
    capacity = Column(Integer, nullable=True)  # null = unlimited
    is_published = Column(Boolean, default=True, nullable=False)
    image_path = Column(String(255), nullable=True)
    organizer_id = Column(Integer, ForeignKey("organizers.id"), nullable=False, index=True)

    # Seats held by GOING responses; only moved by the admission statements
    going_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    organizer = relationship("Organizer", back_populates="events")
    rsvps = relationship("Rsvp", back_populates="event", cascade="all, delete-orphan")
    notifications = relationship("EmailNotification", back_populates="event", cascade="all, delete-orphan")

    @property
    def is_at_capacity(self) -> bool:
        return self.capacity is not None and self.going_count >= self.capacity
