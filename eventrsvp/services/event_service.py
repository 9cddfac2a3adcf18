"""
Event management for organizers and the public event view
"""

import logging
import secrets
import string
from datetime import datetime
from typing import Dict, List

from sqlalchemy.orm import Session

from eventrsvp.models import Event, Organizer
from eventrsvp.schemas.event import EventCreate, EventUpdate
from eventrsvp.services.errors import NotFound, Unauthorized
from eventrsvp.services.repositories import EventRepo, RsvpRepo

logger = logging.getLogger(__name__)

SLUG_ALPHABET = string.ascii_letters + string.digits
SLUG_LENGTH = 10

# Columns that may be cleared by sending an explicit null
NULLABLE_FIELDS = {"description", "capacity"}


class EventService:
    """Service for event CRUD and summaries"""

    @staticmethod
    def generate_slug(db: Session) -> str:
        while True:
            slug = "".join(secrets.choice(SLUG_ALPHABET) for _ in range(SLUG_LENGTH))
            if not EventRepo.slug_exists(db, slug):
                return slug

    @staticmethod
    def create_event(db: Session, organizer: Organizer, data: EventCreate) -> Event:
        event = Event(
            slug=EventService.generate_slug(db),
            title=data.title,
            description=data.description,
            date_time=data.date_time,
            location=data.location,
            capacity=data.capacity,
            is_published=data.is_published,
            organizer_id=organizer.id,
            going_count=0,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        logger.info(f"Organizer {organizer.id} created event {event.id} ({event.slug})")
        return event

    @staticmethod
    def get_owned_event(db: Session, organizer: Organizer, event_id: int) -> Event:
        """The event if ``organizer`` owns it; missing and foreign look the same"""
        event = EventRepo.get_by_id(db, event_id)
        if not event or event.organizer_id != organizer.id:
            raise Unauthorized("Event not found or unauthorized")
        return event

    @staticmethod
    def update_event(db: Session, organizer: Organizer, event_id: int, data: EventUpdate) -> Event:
        event = EventService.get_owned_event(db, organizer, event_id)
        for name, value in data.model_dump(exclude_unset=True).items():
            if value is None and name not in NULLABLE_FIELDS:
                continue
            setattr(event, name, value)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, organizer: Organizer, event_id: int) -> None:
        event = EventService.get_owned_event(db, organizer, event_id)
        db.delete(event)
        db.commit()
        logger.info(f"Organizer {organizer.id} deleted event {event_id}")

    @staticmethod
    def set_event_image(db: Session, organizer: Organizer, event_id: int, image_path: str) -> Event:
        event = EventService.get_owned_event(db, organizer, event_id)
        event.image_path = image_path
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def get_event_detail(db: Session, event: Event) -> Dict:
        counts = RsvpRepo.count_by_status(db, event.id)
        return {
            "id": event.id,
            "slug": event.slug,
            "title": event.title,
            "description": event.description,
            "date_time": event.date_time,
            "location": event.location,
            "capacity": event.capacity,
            "is_published": event.is_published,
            "image_path": event.image_path,
            "going_count": event.going_count,
            "created_at": event.created_at,
            "total_rsvps": sum(counts.values()),
            "status_counts": counts,
            "email_count": RsvpRepo.count_with_email(db, event.id),
        }

    @staticmethod
    def list_organizer_events(db: Session, organizer: Organizer) -> List[Dict]:
        return [
            EventService.get_event_detail(db, event)
            for event in EventRepo.list_for_organizer(db, organizer.id)
        ]

    @staticmethod
    def get_public_event(db: Session, slug: str, now: datetime = None) -> Dict:
        """Public view of a published event"""
        event = EventRepo.get_by_slug(db, slug)
        if not event or not event.is_published:
            raise NotFound("Event not found")

        now = now or datetime.utcnow()
        counts = RsvpRepo.count_by_status(db, event.id)
        return {
            "id": event.id,
            "slug": event.slug,
            "title": event.title,
            "description": event.description,
            "date_time": event.date_time,
            "location": event.location,
            "image_path": event.image_path,
            "host": event.organizer.name or event.organizer.email,
            "capacity": event.capacity,
            "going_count": event.going_count,
            "total_rsvps": sum(counts.values()),
            "is_at_capacity": event.is_at_capacity,
            "is_past": event.date_time < now,
        }
