"""
Public API routes - no authentication required
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from eventrsvp.core.db import get_db
from eventrsvp.schemas.event import PublicEventView
from eventrsvp.schemas.rsvp import RsvpResponse
from eventrsvp.services.event_service import EventService
from eventrsvp.services.qr_service import QRService
from eventrsvp.services.rsvp_service import RsvpService
from eventrsvp.services.session_service import SessionService
from eventrsvp.utils.security import rate_limit_check, get_client_ip
from eventrsvp.utils.responses import success_response, rate_limit_error

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/e/{slug}")
async def get_public_event(
    slug: str,
    request: Request,
    db: Session = Depends(get_db)
):
    """Event page data plus the visitor's own response, if any"""
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip, scope="public"):
        raise rate_limit_error()

    event = PublicEventView(**EventService.get_public_event(db, slug))
    existing = RsvpService.get_rsvp_for_session(
        db, event.id, SessionService.get_anonymous_session(request)
    )

    return success_response(
        message="Event retrieved",
        data={
            "event": event,
            "my_rsvp": RsvpResponse.model_validate(existing) if existing else None
        }
    )

@router.get("/e/{slug}/qr.png")
async def get_qr_code(
    slug: str,
    db: Session = Depends(get_db)
):
    """QR code pointing at the event's share link"""
    EventService.get_public_event(db, slug)

    qr_bytes = QRService.generate_event_qr(slug)

    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=qr_{slug}.png"}
    )
