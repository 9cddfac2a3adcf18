"""
Organizer-triggered email notifications to respondents
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from eventrsvp.core.config import settings
from eventrsvp.models import EmailNotification
from eventrsvp.schemas.auth import NotificationRequest
from eventrsvp.services.email_service import EmailSender, render_notification_email
from eventrsvp.services.errors import Rejection, Unauthorized
from eventrsvp.services.repositories import EventRepo, NotificationRepo, RsvpRepo

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    recipient: str
    delivered: bool
    error: Optional[str] = None


@dataclass
class NotificationResult:
    success: bool
    reason: Optional[Rejection] = None
    deliveries: List[DeliveryResult] = field(default_factory=list)
    log: Optional[EmailNotification] = None

    @property
    def recipient_count(self) -> int:
        return len(self.deliveries)

    @property
    def sent_count(self) -> int:
        return sum(1 for d in self.deliveries if d.delivered)

    @property
    def failed_recipients(self) -> List[str]:
        return [d.recipient for d in self.deliveries if not d.delivered]


class NotificationService:
    """Service for notification blasts"""

    @staticmethod
    def _deliver(sender: EmailSender, recipient: str, subject: str, html: str) -> DeliveryResult:
        try:
            sender.send(to=recipient, subject=subject, html=html)
            return DeliveryResult(recipient=recipient, delivered=True)
        except Exception as e:
            logger.warning(f"Notification to {recipient} failed: {e}")
            return DeliveryResult(recipient=recipient, delivered=False, error=str(e))

    @staticmethod
    def send_event_notification(
        db: Session,
        organizer_id: int,
        event_id: int,
        request: NotificationRequest,
        sender: EmailSender,
        max_workers: int = None,
    ) -> NotificationResult:
        """Email every respondent in the chosen statuses who left an address.

        Each recipient is an independent attempt; delivered messages are
        never rolled back. The audit row records how many went out.
        """
        event = EventRepo.get_by_id(db, event_id)
        if not event or event.organizer_id != organizer_id:
            raise Unauthorized("Event not found or unauthorized")

        recipients = list(dict.fromkeys(
            rsvp.email for rsvp in RsvpRepo.list_recipients(db, event.id, request.statuses)
        ))
        if not recipients:
            logger.warning(f"No recipients with email addresses for event {event.id}")
            return NotificationResult(success=False, reason=Rejection.NO_RECIPIENTS)

        event_url = f"{settings.BASE_URL}/e/{event.slug}"
        html = render_notification_email(event.title, request.subject, request.body, event_url)

        workers = max(1, min(max_workers or settings.NOTIFICATION_WORKERS, len(recipients)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            deliveries = list(executor.map(
                lambda recipient: NotificationService._deliver(sender, recipient, request.subject, html),
                recipients,
            ))

        result = NotificationResult(success=True, deliveries=deliveries)
        if result.failed_recipients:
            result.success = False
            result.reason = Rejection.PARTIAL_DELIVERY_FAILURE

        try:
            result.log = NotificationRepo.create(
                db,
                event_id=event.id,
                subject=request.subject,
                body=request.body,
                recipient_count=result.recipient_count,
                sent_count=result.sent_count,
                failed_count=len(result.failed_recipients),
            )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"Failed to record notification log for event {event.id}")
            raise

        logger.info(
            f"Notification for event {event.id}: {result.sent_count}/{result.recipient_count} delivered"
        )
        return result

    @staticmethod
    def get_notification_history(db: Session, organizer_id: int, event_id: int, limit: int = 10) -> List[EmailNotification]:
        event = EventRepo.get_by_id(db, event_id)
        if not event or event.organizer_id != organizer_id:
            return []
        return NotificationRepo.recent(db, event.id, limit=limit)
