"""
Event-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional, Dict
from pydantic import BaseModel, Field

class EventCreate(BaseModel):
    """Schema for creating an event"""
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    date_time: datetime
    location: str = Field(..., min_length=1, max_length=200)
    capacity: Optional[int] = Field(None, gt=0)
    is_published: bool = True

class EventUpdate(BaseModel):
    """Schema for updating an event; slug is never editable"""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    date_time: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    capacity: Optional[int] = Field(None, gt=0)
    is_published: Optional[bool] = None

class EventResponse(BaseModel):
    """Basic event response"""
    id: int
    slug: str
    title: str
    description: Optional[str] = None
    date_time: datetime
    location: str
    capacity: Optional[int] = None
    is_published: bool
    image_path: Optional[str] = None
    going_count: int
    created_at: datetime

    class Config:
        from_attributes = True

class EventDetail(EventResponse):
    """Organizer view with response counts"""
    total_rsvps: int
    status_counts: Dict[str, int]
    email_count: int

class PublicEventView(BaseModel):
    """What a guest sees on the shared event link"""
    id: int
    slug: str
    title: str
    description: Optional[str] = None
    date_time: datetime
    location: str
    image_path: Optional[str] = None
    host: str
    capacity: Optional[int] = None
    going_count: int
    total_rsvps: int
    is_at_capacity: bool
    is_past: bool
