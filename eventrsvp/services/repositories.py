"""
Repository layer over the relational store.

Repositories only flush; the calling service owns the transaction and
decides when to commit or roll back.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from eventrsvp.models import (
    EmailNotification,
    Event,
    Organizer,
    Rsvp,
    RsvpStatus,
    RsvpUser,
    VerificationToken,
)


# -------- Organizer repository --------

class OrganizerRepo:
    @staticmethod
    def get_or_create(db: Session, email: str, name: Optional[str] = None) -> Organizer:
        organizer = db.query(Organizer).filter(Organizer.email == email).first()
        if organizer:
            return organizer
        organizer = Organizer(email=email, name=name)
        db.add(organizer)
        db.flush()
        return organizer


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_id(db: Session, event_id: int) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[Event]:
        return db.query(Event).filter(Event.slug == slug).first()

    @staticmethod
    def slug_exists(db: Session, slug: str) -> bool:
        return db.query(Event.id).filter(Event.slug == slug).first() is not None

    @staticmethod
    def list_for_organizer(db: Session, organizer_id: int) -> List[Event]:
        return db.query(Event).filter(Event.organizer_id == organizer_id).order_by(Event.date_time.asc()).all()

    @staticmethod
    def reserve_seat(db: Session, event_id: int) -> bool:
        """Take one GOING seat if one is free.

        Single conditional UPDATE: the row lock serialises competing writers
        and the WHERE clause is evaluated against the latest committed count.
        """
        result = db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                or_(Event.capacity.is_(None), Event.going_count < Event.capacity),
            )
            .values(going_count=Event.going_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def take_seat(db: Session, event_id: int) -> None:
        """Take a seat without checking capacity."""
        db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(going_count=Event.going_count + 1)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def release_seat(db: Session, event_id: int) -> None:
        db.execute(
            update(Event)
            .where(Event.id == event_id, Event.going_count > 0)
            .values(going_count=Event.going_count - 1)
            .execution_options(synchronize_session=False)
        )


# -------- RSVP repository --------

class RsvpRepo:
    @staticmethod
    def find_by_session(db: Session, event_id: int, session_token: str) -> Optional[Rsvp]:
        return db.query(Rsvp).filter(
            Rsvp.event_id == event_id,
            Rsvp.session_token == session_token,
        ).first()

    @staticmethod
    def find_by_email(db: Session, event_id: int, email: str) -> Optional[Rsvp]:
        return db.query(Rsvp).filter(
            Rsvp.event_id == event_id,
            Rsvp.email == email,
        ).first()

    @staticmethod
    def count_going(db: Session, event_id: int) -> int:
        return db.query(func.count(Rsvp.id)).filter(
            Rsvp.event_id == event_id,
            Rsvp.status == RsvpStatus.GOING,
        ).scalar()

    @staticmethod
    def count_by_status(db: Session, event_id: int) -> Dict[str, int]:
        rows = db.query(Rsvp.status, func.count(Rsvp.id)).filter(
            Rsvp.event_id == event_id
        ).group_by(Rsvp.status).all()
        counts = {status.value: 0 for status in RsvpStatus}
        for status, count in rows:
            counts[status.value] = count
        return counts

    @staticmethod
    def count_with_email(db: Session, event_id: int) -> int:
        return db.query(func.count(Rsvp.id)).filter(
            Rsvp.event_id == event_id,
            Rsvp.email.isnot(None),
        ).scalar()

    @staticmethod
    def list_for_event(
        db: Session,
        event_id: int,
        status: Optional[RsvpStatus] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Rsvp]:
        query = db.query(Rsvp).filter(Rsvp.event_id == event_id)
        if status:
            query = query.filter(Rsvp.status == status)
        query = query.order_by(Rsvp.created_at.desc(), Rsvp.id.desc()).offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def list_recipients(db: Session, event_id: int, statuses: Sequence[RsvpStatus]) -> List[Rsvp]:
        return db.query(Rsvp).filter(
            Rsvp.event_id == event_id,
            Rsvp.status.in_(list(statuses)),
            Rsvp.email.isnot(None),
        ).order_by(Rsvp.id).all()

    @staticmethod
    def link_to_user(db: Session, email: str, rsvp_user_id: int) -> int:
        """Claim every unlinked RSVP carrying this email. Returns rows linked."""
        return db.query(Rsvp).filter(
            Rsvp.email == email,
            Rsvp.rsvp_user_id.is_(None),
        ).update({Rsvp.rsvp_user_id: rsvp_user_id}, synchronize_session=False)

    @staticmethod
    def list_for_user(db: Session, rsvp_user_id: int) -> List[Rsvp]:
        return db.query(Rsvp).join(Event, Rsvp.event_id == Event.id).filter(
            Rsvp.rsvp_user_id == rsvp_user_id
        ).order_by(Event.date_time.asc()).all()


# -------- Verified identity repositories --------

class RsvpUserRepo:
    @staticmethod
    def get_by_id(db: Session, rsvp_user_id: int) -> Optional[RsvpUser]:
        return db.query(RsvpUser).filter(RsvpUser.id == rsvp_user_id).first()

    @staticmethod
    def get_or_create(db: Session, email: str) -> RsvpUser:
        user = db.query(RsvpUser).filter(RsvpUser.email == email).first()
        if user:
            return user
        user = RsvpUser(email=email)
        db.add(user)
        db.flush()
        return user


class TokenRepo:
    @staticmethod
    def get(db: Session, token: str) -> Optional[VerificationToken]:
        return db.query(VerificationToken).filter(VerificationToken.token == token).first()

    @staticmethod
    def create(db: Session, token: str, expires: datetime, rsvp_user_id: int) -> VerificationToken:
        record = VerificationToken(token=token, expires=expires, rsvp_user_id=rsvp_user_id)
        db.add(record)
        db.flush()
        return record

    @staticmethod
    def consume(db: Session, token_id: int) -> bool:
        """Delete one token row. False if another request already consumed it."""
        deleted = db.query(VerificationToken).filter(
            VerificationToken.id == token_id
        ).delete(synchronize_session=False)
        return deleted == 1

    @staticmethod
    def delete_for_user(db: Session, rsvp_user_id: int) -> int:
        return db.query(VerificationToken).filter(
            VerificationToken.rsvp_user_id == rsvp_user_id
        ).delete(synchronize_session=False)


# -------- Notification log repository --------

class NotificationRepo:
    @staticmethod
    def create(
        db: Session,
        event_id: int,
        subject: str,
        body: str,
        recipient_count: int,
        sent_count: int,
        failed_count: int,
    ) -> EmailNotification:
        record = EmailNotification(
            event_id=event_id,
            subject=subject,
            body=body,
            recipient_count=recipient_count,
            sent_count=sent_count,
            failed_count=failed_count,
        )
        db.add(record)
        db.flush()
        return record

    @staticmethod
    def recent(db: Session, event_id: int, limit: int = 10) -> List[EmailNotification]:
        return db.query(EmailNotification).filter(
            EmailNotification.event_id == event_id
        ).order_by(EmailNotification.sent_at.desc(), EmailNotification.id.desc()).limit(limit).all()
