"""
Sign-in links for respondents who gave an email when they RSVP'd
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from eventrsvp.core.config import settings
from eventrsvp.models import RsvpUser
from eventrsvp.services.email_service import EmailSender, render_verification_email
from eventrsvp.services.errors import InvalidToken, TokenExpired
from eventrsvp.services.repositories import RsvpRepo, RsvpUserRepo, TokenRepo

logger = logging.getLogger(__name__)


@dataclass
class LoginLink:
    email: str
    verify_url: str


class VerificationService:
    """Issue and consume single-use verification tokens"""

    @staticmethod
    def get_verify_url(token: str) -> str:
        return f"{settings.BASE_URL}/rsvp/verify?token={token}"

    @staticmethod
    def request_login_link(db: Session, email: str, now: datetime = None) -> LoginLink:
        """Mint a fresh token for ``email``, invalidating any earlier link"""
        now = now or datetime.utcnow()
        try:
            user = RsvpUserRepo.get_or_create(db, email)
            removed = TokenRepo.delete_for_user(db, user.id)
            token = secrets.token_urlsafe(32)
            TokenRepo.create(
                db,
                token=token,
                expires=now + timedelta(hours=settings.VERIFICATION_TOKEN_TTL_HOURS),
                rsvp_user_id=user.id,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        if removed:
            logger.info(f"Invalidated {removed} earlier login link(s) for RSVP user {user.id}")
        return LoginLink(email=email, verify_url=VerificationService.get_verify_url(token))

    @staticmethod
    def send_login_link(link: LoginLink, sender: EmailSender) -> bool:
        """Deliver the link; failures are logged, never raised to the requester"""
        try:
            sender.send(
                to=link.email,
                subject="Sign in to manage your RSVPs",
                html=render_verification_email(link.verify_url),
            )
            return True
        except Exception:
            logger.exception(f"Failed to send login link to {link.email}")
            return False

    @staticmethod
    def verify_token(db: Session, token: str, now: datetime = None) -> RsvpUser:
        """Consume a token and claim the respondent's earlier RSVPs.

        Deleting the token, marking verified and linking RSVPs commit
        together, so an interrupted verification leaves the token usable.
        The delete goes first and must hit exactly one row; a concurrent
        request that already consumed the token wins and this one fails.
        """
        now = now or datetime.utcnow()
        record = TokenRepo.get(db, token)
        if record is None:
            raise InvalidToken("Invalid token")

        if record.is_expired(now):
            try:
                TokenRepo.consume(db, record.id)
                db.commit()
            except Exception:
                db.rollback()
                raise
            raise TokenExpired("Token has expired")

        user = record.rsvp_user
        try:
            if not TokenRepo.consume(db, record.id):
                logger.warning(f"Login link for RSVP user {user.id} was already used")
                raise InvalidToken("Invalid token")
            if user.email_verified is None:
                user.email_verified = now
            linked = RsvpRepo.link_to_user(db, user.email, user.id)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Verified RSVP user {user.id}; linked {linked} RSVP(s)")
        return user
