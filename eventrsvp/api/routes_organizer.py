"""
Organizer API routes - requires identity provider bearer token
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from eventrsvp.core.db import get_db
from eventrsvp.models import Organizer, RsvpStatus
from eventrsvp.schemas.auth import NotificationRequest, NotificationLog
from eventrsvp.schemas.event import EventCreate, EventUpdate, EventDetail
from eventrsvp.schemas.rsvp import RsvpResponse
from eventrsvp.services.email_service import EmailSender, get_email_sender
from eventrsvp.services.errors import Rejection
from eventrsvp.services.event_service import EventService
from eventrsvp.services.export_service import ExportService
from eventrsvp.services.notification_service import NotificationService
from eventrsvp.services.repositories import RsvpRepo
from eventrsvp.services.storage_service import StorageService, get_storage
from eventrsvp.utils.security import get_current_organizer
from eventrsvp.utils.responses import success_response, error_response

router = APIRouter()

@router.get("/events")
async def list_events(
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Dashboard: the organizer's events with response counts"""
    events = [EventDetail(**row) for row in EventService.list_organizer_events(db, organizer)]
    return success_response(
        message="Events retrieved",
        data={"events": events}
    )

@router.post("/events")
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Create a new event"""
    event = EventService.create_event(db, organizer, event_data)
    return success_response(
        message="Event created successfully",
        data=EventDetail(**EventService.get_event_detail(db, event)),
        status_code=201
    )

@router.get("/events/{event_id}")
async def get_event_details(
    event_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Get detailed event information"""
    event = EventService.get_owned_event(db, organizer, event_id)
    return success_response(
        message="Event details retrieved",
        data=EventDetail(**EventService.get_event_detail(db, event))
    )

@router.patch("/events/{event_id}")
async def update_event(
    event_id: int,
    event_update: EventUpdate,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Update event fields; the slug never changes"""
    event = EventService.update_event(db, organizer, event_id, event_update)
    return success_response(
        message="Event updated successfully",
        data=EventDetail(**EventService.get_event_detail(db, event))
    )

@router.delete("/events/{event_id}")
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Delete an event and all of its RSVPs"""
    EventService.delete_event(db, organizer, event_id)
    return success_response(
        message="Event deleted successfully",
        data={"deleted_event_id": event_id}
    )

@router.post("/events/{event_id}/image")
async def upload_event_image(
    event_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
    storage: StorageService = Depends(get_storage)
):
    """Upload the event's cover image"""
    EventService.get_owned_event(db, organizer, event_id)

    file_content = await file.read()
    image_path = storage.store_image(file_content, file.content_type)
    event = EventService.set_event_image(db, organizer, event_id, image_path)

    return success_response(
        message="Image uploaded",
        data={"path": event.image_path}
    )

@router.get("/events/{event_id}/rsvps")
async def list_rsvps(
    event_id: int,
    status: Optional[RsvpStatus] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """List an event's responses, newest first"""
    event = EventService.get_owned_event(db, organizer, event_id)

    offset = (page - 1) * per_page
    rsvps = RsvpRepo.list_for_event(db, event.id, status=status, offset=offset, limit=per_page)
    counts = RsvpRepo.count_by_status(db, event.id)
    total = counts[status.value] if status else sum(counts.values())

    return success_response(
        message="RSVPs retrieved successfully",
        data={
            "rsvps": [RsvpResponse.model_validate(r) for r in rsvps],
            "status_counts": counts,
            "email_count": RsvpRepo.count_with_email(db, event.id),
            "pagination": {
                "page": page,
                "per_page": per_page,
                "total": total,
                "pages": (total + per_page - 1) // per_page
            }
        }
    )

@router.get("/events/{event_id}/rsvps/export.csv")
async def export_rsvps_csv(
    event_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Download responses as CSV"""
    event = EventService.get_owned_event(db, organizer, event_id)
    return Response(
        content=ExportService.export_csv(event.id, db),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=rsvps_{event.slug}.csv"}
    )

@router.get("/events/{event_id}/rsvps/export.xlsx")
async def export_rsvps_excel(
    event_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Download responses as an Excel workbook"""
    event = EventService.get_owned_event(db, organizer, event_id)
    return Response(
        content=ExportService.export_excel(event.id, db),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=rsvps_{event.slug}.xlsx"}
    )

@router.post("/events/{event_id}/notify")
def notify_respondents(
    event_id: int,
    notification: NotificationRequest,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
    sender: EmailSender = Depends(get_email_sender)
):
    """Email respondents in the selected statuses"""
    result = NotificationService.send_event_notification(
        db, organizer.id, event_id, notification, sender
    )

    if result.reason == Rejection.NO_RECIPIENTS:
        return error_response(
            message="No recipients with email addresses",
            error_code=result.reason.value,
            status_code=422
        )

    data = {
        "recipient_count": result.recipient_count,
        "sent_count": result.sent_count,
        "failed_recipients": result.failed_recipients
    }
    if not result.success:
        return error_response(
            message="Failed to send some emails",
            error_code=result.reason.value,
            details=data,
            status_code=502
        )

    return success_response(
        message=f"Notification sent to {result.sent_count} recipient(s)",
        data=data
    )

@router.get("/events/{event_id}/notifications")
async def notification_history(
    event_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer)
):
    """Last ten notifications sent for the event"""
    logs = NotificationService.get_notification_history(db, organizer.id, event_id)
    return success_response(
        message="Notification history retrieved",
        data={"notifications": [NotificationLog.model_validate(log) for log in logs]}
    )
