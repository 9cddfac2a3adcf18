"""
Respondent-facing API routes
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from eventrsvp.api.ws import websocket_manager
from eventrsvp.core.db import get_db
from eventrsvp.models import RsvpStatus
from eventrsvp.schemas.auth import LoginLinkRequest
from eventrsvp.schemas.rsvp import RsvpCreate, RsvpResponse, ManagedRsvp
from eventrsvp.services.email_service import EmailSender, get_email_sender
from eventrsvp.services.errors import InvalidToken, TokenExpired
from eventrsvp.services.live_service import LiveUpdateService
from eventrsvp.services.rsvp_service import RsvpService
from eventrsvp.services.session_service import SessionService
from eventrsvp.services.verification_service import VerificationService
from eventrsvp.utils.security import rate_limit_check, get_client_ip
from eventrsvp.utils.responses import success_response, error_response, rate_limit_error, unauthorized_error

logger = logging.getLogger(__name__)

router = APIRouter()

live_updates = LiveUpdateService(websocket_manager)

@router.post("/events/{event_id}")
async def submit_rsvp(
    event_id: int,
    rsvp_data: RsvpCreate,
    request: Request,
    db: Session = Depends(get_db)
):
    """Create or update the visitor's RSVP"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip, scope="rsvp"):
        raise rate_limit_error()

    identity, _ = SessionService.build_identity(request, db)
    result = RsvpService.submit_response(db, event_id, identity, rsvp_data)

    if not result.success:
        return error_response(
            message="Event is at capacity",
            error_code=result.reason.value,
            details={
                "available_statuses": [s.value for s in RsvpStatus if s != RsvpStatus.GOING]
            },
            status_code=409
        )

    response = success_response(
        message="RSVP updated" if result.is_update else "RSVP received",
        data={
            "rsvp": RsvpResponse.model_validate(result.rsvp),
            "is_update": result.is_update
        },
        status_code=200 if result.is_update else 201
    )
    SessionService.set_anonymous_session_cookie(response, identity.session_token)

    await live_updates.broadcast_rsvp_counts(db, event_id)
    return response

@router.get("/events/{event_id}/mine")
async def get_my_rsvp(
    event_id: int,
    request: Request,
    db: Session = Depends(get_db)
):
    """The visitor's RSVP for an event, recognised by session cookie"""
    rsvp = RsvpService.get_rsvp_for_session(
        db, event_id, SessionService.get_anonymous_session(request)
    )
    return success_response(
        message="RSVP found" if rsvp else "No RSVP for this browser",
        data=RsvpResponse.model_validate(rsvp) if rsvp else None
    )

@router.post("/login", status_code=202)
async def request_login_link(
    login_data: LoginLinkRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender)
):
    """Email a single-use sign-in link"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip, limit=5, scope="login"):
        raise rate_limit_error()

    link = VerificationService.request_login_link(db, login_data.email)
    background_tasks.add_task(VerificationService.send_login_link, link, sender)

    return success_response(
        message="Check your email for a sign-in link",
        status_code=202
    )

LOGIN_LINK_ERRORS = {
    "invalid": (InvalidToken.error_code, "This sign-in link is invalid or was already used. Request a new one."),
    "expired": (TokenExpired.error_code, "This sign-in link has expired. Request a new one."),
}

@router.get("/login")
async def login_prompt(error: Optional[str] = None):
    """Where failed sign-in links land; tells the respondent to request a new link"""
    if error in LOGIN_LINK_ERRORS:
        error_code, message = LOGIN_LINK_ERRORS[error]
        return error_response(
            message=message,
            error_code=error_code,
            details={"retry": "POST /rsvp/login"},
            status_code=400
        )
    return success_response(
        message="Enter your email to receive a sign-in link",
        data={"retry": "POST /rsvp/login"}
    )

@router.get("/verify")
async def verify_login_link(
    token: str,
    db: Session = Depends(get_db)
):
    """Consume a sign-in link and start a verified session"""
    try:
        user = VerificationService.verify_token(db, token)
    except InvalidToken:
        return RedirectResponse(url="/rsvp/login?error=invalid", status_code=303)
    except TokenExpired:
        return RedirectResponse(url="/rsvp/login?error=expired", status_code=303)

    response = RedirectResponse(url="/rsvp/manage", status_code=303)
    SessionService.set_user_session_cookie(response, SessionService.create_user_session_token(user.id))
    return response

@router.get("/manage")
async def manage_rsvps(
    request: Request,
    db: Session = Depends(get_db)
):
    """Every RSVP claimed by the signed-in respondent"""
    user_id = SessionService.get_user_session(request)
    if user_id is None:
        unauthorized_error("Sign in to manage your RSVPs")

    rsvps = [ManagedRsvp(**row) for row in RsvpService.list_user_rsvps(db, user_id)]
    return success_response(
        message="RSVPs retrieved",
        data={"rsvps": rsvps}
    )

@router.post("/logout")
async def logout():
    response = success_response(message="Signed out")
    SessionService.clear_user_session(response)
    return response
