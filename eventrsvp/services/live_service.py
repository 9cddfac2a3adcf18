"""
Live RSVP count broadcasting
"""

from datetime import datetime
from sqlalchemy.orm import Session

from eventrsvp.api.ws import WebSocketManager
from eventrsvp.services.repositories import EventRepo, RsvpRepo

class LiveUpdateService:
    """Pushes fresh counts to open event pages after a submission"""

    def __init__(self, websocket_manager: WebSocketManager):
        self.websocket_manager = websocket_manager

    def build_counts_message(self, db: Session, event_id: int):
        event = EventRepo.get_by_id(db, event_id)
        if not event or not event.is_published:
            return None, None

        counts = RsvpRepo.count_by_status(db, event.id)
        message = {
            "type": "rsvp_counts",
            "going_count": event.going_count,
            "capacity": event.capacity,
            "is_at_capacity": event.is_at_capacity,
            "total_rsvps": sum(counts.values()),
            "status_counts": counts,
            "timestamp": datetime.utcnow().isoformat(),
        }
        return event.slug, message

    async def broadcast_rsvp_counts(self, db: Session, event_id: int):
        slug, message = self.build_counts_message(db, event_id)
        if slug is None:
            return
        await self.websocket_manager.broadcast_to_event(slug, message)
