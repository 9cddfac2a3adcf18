"""
Anonymous respondent sessions and signed verified-identity sessions
"""

import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple

import jwt
from fastapi import Request, Response
from sqlalchemy.orm import Session

from eventrsvp.core.config import settings
from eventrsvp.models.rsvp import SESSION_TOKEN_LENGTH
from eventrsvp.services.repositories import RsvpUserRepo
from eventrsvp.services.rsvp_service import RequestIdentity

ANONYMOUS_SESSION_COOKIE = "rsvp-anon-session"
RSVP_USER_SESSION_COOKIE = "rsvp-user-session"
JWT_ALGORITHM = "HS256"


class SessionService:
    """Cookie issuing and reading for respondents"""

    @staticmethod
    def get_anonymous_session(request: Request) -> Optional[str]:
        """None when missing or longer than any token this service issues"""
        token = request.cookies.get(ANONYMOUS_SESSION_COOKIE)
        if not token or len(token) > SESSION_TOKEN_LENGTH:
            return None
        return token

    @staticmethod
    def get_or_create_anonymous_session(request: Request) -> Tuple[str, bool]:
        """Return the browser's session token and whether it was just minted"""
        existing = SessionService.get_anonymous_session(request)
        if existing:
            return existing, False
        return str(uuid.uuid4()), True

    @staticmethod
    def set_anonymous_session_cookie(response: Response, session_token: str) -> None:
        response.set_cookie(
            key=ANONYMOUS_SESSION_COOKIE,
            value=session_token,
            max_age=settings.ANON_SESSION_DAYS * 24 * 60 * 60,
            path="/",
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
        )

    @staticmethod
    def create_user_session_token(rsvp_user_id: int, now: datetime = None) -> str:
        now = now or datetime.utcnow()
        payload = {
            "userId": rsvp_user_id,
            "iat": now,
            "exp": now + timedelta(days=settings.USER_SESSION_DAYS),
        }
        return jwt.encode(payload, settings.RSVP_SESSION_SECRET, algorithm=JWT_ALGORITHM)

    @staticmethod
    def set_user_session_cookie(response: Response, token: str) -> None:
        response.set_cookie(
            key=RSVP_USER_SESSION_COOKIE,
            value=token,
            max_age=settings.USER_SESSION_DAYS * 24 * 60 * 60,
            path="/",
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
        )

    @staticmethod
    def decode_user_session(token: Optional[str]) -> Optional[int]:
        """User id from a session token, or None if missing, forged or expired"""
        if not token:
            return None
        try:
            payload = jwt.decode(token, settings.RSVP_SESSION_SECRET, algorithms=[JWT_ALGORITHM])
        except jwt.PyJWTError:
            return None
        user_id = payload.get("userId")
        return user_id if isinstance(user_id, int) else None

    @staticmethod
    def get_user_session(request: Request) -> Optional[int]:
        return SessionService.decode_user_session(request.cookies.get(RSVP_USER_SESSION_COOKIE))

    @staticmethod
    def clear_user_session(response: Response) -> None:
        response.delete_cookie(RSVP_USER_SESSION_COOKIE, path="/")

    @staticmethod
    def build_identity(request: Request, db: Session) -> Tuple[RequestIdentity, bool]:
        """Collect everything the reconciliation engine needs from the request"""
        session_token, is_new = SessionService.get_or_create_anonymous_session(request)
        identity = RequestIdentity(session_token=session_token)

        user_id = SessionService.get_user_session(request)
        if user_id is not None:
            user = RsvpUserRepo.get_by_id(db, user_id)
            if user is not None and user.email_verified is not None:
                identity.rsvp_user_id = user.id
                identity.verified_email = user.email

        return identity, is_new
