"""
RSVP reconciliation and capacity enforcement
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventrsvp.core.config import settings
from eventrsvp.models import Event, Rsvp, RsvpStatus
from eventrsvp.schemas.rsvp import RsvpCreate
from eventrsvp.services.errors import NotFound, Rejection
from eventrsvp.services.repositories import EventRepo, RsvpRepo

logger = logging.getLogger(__name__)


@dataclass
class RequestIdentity:
    """Who is responding, as established by the request's cookies."""
    session_token: str
    rsvp_user_id: Optional[int] = None
    verified_email: Optional[str] = None


class SubmitOutcome(str, enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    REJECTED = "rejected"


@dataclass
class SubmitResult:
    outcome: SubmitOutcome
    rsvp: Optional[Rsvp] = None
    reason: Optional[Rejection] = None

    @property
    def success(self) -> bool:
        return self.outcome != SubmitOutcome.REJECTED

    @property
    def is_update(self) -> bool:
        return self.outcome == SubmitOutcome.UPDATED


class RsvpService:
    """Service for respondent submissions"""

    @staticmethod
    def resolve_existing(
        db: Session,
        event_id: int,
        session_token: str,
        email: Optional[str],
    ) -> Tuple[Optional[Rsvp], Optional[Rsvp]]:
        """Find the respondent's existing RSVP on either identity axis.

        Returns ``(match, duplicate)``. The session-token row wins when both
        axes hit different rows; the email row is then returned as the
        duplicate so the caller can fold it into the match.
        """
        by_session = RsvpRepo.find_by_session(db, event_id, session_token)
        by_email = RsvpRepo.find_by_email(db, event_id, email) if email else None

        if by_session is not None:
            if by_email is not None and by_email.id != by_session.id:
                return by_session, by_email
            return by_session, None
        return by_email, None

    @staticmethod
    def submit_response(
        db: Session,
        event_id: int,
        identity: RequestIdentity,
        data: RsvpCreate,
    ) -> SubmitResult:
        """Create, update or reject a respondent's RSVP in one transaction."""
        try:
            return RsvpService._submit(db, event_id, identity, data)
        except IntegrityError:
            # A concurrent first submission for the same session or email
            # committed first; what was a create is now an update.
            db.rollback()
            logger.info(f"Unique conflict on event {event_id}, retrying submission as update")
            try:
                return RsvpService._submit(db, event_id, identity, data)
            except Exception:
                db.rollback()
                raise
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def _submit(db: Session, event_id: int, identity: RequestIdentity, data: RsvpCreate) -> SubmitResult:
        event = EventRepo.get_by_id(db, event_id)
        if not event:
            raise NotFound("Event not found")

        existing, duplicate = RsvpService.resolve_existing(db, event.id, identity.session_token, data.email)

        if existing is not None:
            return RsvpService._update(db, event, existing, duplicate, identity, data)

        if data.status == RsvpStatus.GOING and not EventRepo.reserve_seat(db, event.id):
            logger.warning(f"Event {event.id} is at capacity; rejected new GOING response")
            db.rollback()
            return SubmitResult(SubmitOutcome.REJECTED, reason=Rejection.CAPACITY_EXCEEDED)

        rsvp = Rsvp(
            event_id=event.id,
            first_name=data.first_name,
            last_initial=data.last_initial,
            email=data.email,
            status=data.status,
            session_token=identity.session_token,
            rsvp_user_id=RsvpService._claimed_by(identity, data),
        )
        db.add(rsvp)
        db.flush()
        db.commit()
        db.refresh(rsvp)

        logger.info(f"Created RSVP {rsvp.id} for event {event.id} ({rsvp.status.value})")
        return SubmitResult(SubmitOutcome.CREATED, rsvp=rsvp)

    @staticmethod
    def _update(
        db: Session,
        event: Event,
        rsvp: Rsvp,
        duplicate: Optional[Rsvp],
        identity: RequestIdentity,
        data: RsvpCreate,
    ) -> SubmitResult:
        held_seat = rsvp.status == RsvpStatus.GOING

        if duplicate is not None:
            # Same respondent reached by both axes on different rows
            if duplicate.status == RsvpStatus.GOING:
                EventRepo.release_seat(db, event.id)
            if rsvp.rsvp_user_id is None:
                rsvp.rsvp_user_id = duplicate.rsvp_user_id
            logger.info(f"Merging RSVP {duplicate.id} into {rsvp.id} for event {event.id}")
            db.delete(duplicate)
            db.flush()

        wants_seat = data.status == RsvpStatus.GOING
        if wants_seat and not held_seat:
            if settings.RECHECK_CAPACITY_ON_UPDATE:
                if not EventRepo.reserve_seat(db, event.id):
                    logger.warning(f"Event {event.id} is at capacity; rejected switch to GOING for RSVP {rsvp.id}")
                    db.rollback()
                    return SubmitResult(SubmitOutcome.REJECTED, reason=Rejection.CAPACITY_EXCEEDED)
            else:
                EventRepo.take_seat(db, event.id)
        elif held_seat and not wants_seat:
            EventRepo.release_seat(db, event.id)

        rsvp.first_name = data.first_name
        rsvp.last_initial = data.last_initial
        rsvp.email = data.email
        rsvp.status = data.status
        rsvp.session_token = identity.session_token
        if rsvp.rsvp_user_id is None:
            rsvp.rsvp_user_id = RsvpService._claimed_by(identity, data)

        db.flush()
        db.commit()
        db.refresh(rsvp)

        logger.info(f"Updated RSVP {rsvp.id} for event {event.id} ({rsvp.status.value})")
        return SubmitResult(SubmitOutcome.UPDATED, rsvp=rsvp)

    @staticmethod
    def _claimed_by(identity: RequestIdentity, data: RsvpCreate) -> Optional[int]:
        if identity.rsvp_user_id and data.email and data.email == identity.verified_email:
            return identity.rsvp_user_id
        return None

    @staticmethod
    def get_rsvp_for_session(db: Session, event_id: int, session_token: Optional[str]) -> Optional[Rsvp]:
        if not session_token:
            return None
        return RsvpRepo.find_by_session(db, event_id, session_token)

    @staticmethod
    def list_user_rsvps(db: Session, rsvp_user_id: int) -> List[dict]:
        """A verified respondent's RSVPs across events, soonest event first"""
        return [
            {
                "id": rsvp.id,
                "status": rsvp.status,
                "first_name": rsvp.first_name,
                "last_initial": rsvp.last_initial,
                "event_id": rsvp.event.id,
                "event_title": rsvp.event.title,
                "event_slug": rsvp.event.slug,
                "event_date_time": rsvp.event.date_time,
                "event_location": rsvp.event.location,
            }
            for rsvp in RsvpRepo.list_for_user(db, rsvp_user_id)
        ]
