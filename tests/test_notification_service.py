"""
Tests for organizer notifications
"""

import threading

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from eventrsvp.core.db import Base
from eventrsvp.models import EmailNotification, Event, Organizer, Rsvp, RsvpStatus
from eventrsvp.schemas.auth import NotificationRequest
from eventrsvp.services.email_service import EmailSender
from eventrsvp.services.errors import Rejection, Unauthorized
from eventrsvp.services.notification_service import NotificationService

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_notifications.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

class RecordingSender(EmailSender):
    """Collects messages instead of sending them"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.sent = []
        self._lock = threading.Lock()

    def send(self, to, subject, html):
        if to in self.failing:
            raise ConnectionError("mailbox unavailable")
        with self._lock:
            self.sent.append((to, subject, html))

@pytest.fixture
def event_with_rsvps(db_session):
    host = Organizer(email="host@example.com")
    other = Organizer(email="other@example.com")
    db_session.add_all([host, other])
    db_session.flush()

    event = Event(slug="NOTIFY1", title="Board Games", date_time=datetime(2030, 3, 3, 19, 0),
                  location="Library", organizer_id=host.id)
    db_session.add(event)
    db_session.flush()

    rows = [
        ("Ada", "ada@example.com", RsvpStatus.GOING),
        ("Bob", "bob@example.com", RsvpStatus.GOING),
        ("Cy", None, RsvpStatus.GOING),
        ("Di", "di@example.com", RsvpStatus.MAYBE),
        ("Ed", "ed@example.com", RsvpStatus.NOT_GOING),
    ]
    for i, (name, email, status) in enumerate(rows):
        db_session.add(Rsvp(event_id=event.id, first_name=name, last_initial="X",
                            email=email, status=status, session_token=f"s{i}"))
    db_session.commit()
    return host, other, event

def request(statuses, subject="Bring snacks", body="Doors open at 7 & games start at 7:30"):
    return NotificationRequest(subject=subject, body=body, statuses=statuses)

def test_sends_to_selected_statuses_with_email(db_session, event_with_rsvps):
    host, _, event = event_with_rsvps
    sender = RecordingSender()

    result = NotificationService.send_event_notification(
        db_session, host.id, event.id, request(["GOING", "MAYBE"]), sender
    )

    assert result.success
    assert sorted(to for to, _, _ in sender.sent) == ["ada@example.com", "bob@example.com", "di@example.com"]
    assert result.recipient_count == 3
    assert result.sent_count == 3

    # Body is escaped into the template
    _, subject, html = sender.sent[0]
    assert subject == "Bring snacks"
    assert "7 &amp; games" in html
    assert f"/e/{event.slug}" in html

    log = db_session.query(EmailNotification).one()
    assert (log.recipient_count, log.sent_count, log.failed_count) == (3, 3, 0)

def test_no_recipients_sends_nothing(db_session, event_with_rsvps):
    host, _, event = event_with_rsvps
    sender = RecordingSender()

    result = NotificationService.send_event_notification(
        db_session, host.id, event.id, request(["INTERESTED_IN_FUTURE"]), sender
    )

    assert not result.success
    assert result.reason == Rejection.NO_RECIPIENTS
    assert sender.sent == []
    assert db_session.query(EmailNotification).count() == 0

def test_partial_failure_is_reported_and_logged(db_session, event_with_rsvps):
    host, _, event = event_with_rsvps
    sender = RecordingSender(failing={"bob@example.com"})

    result = NotificationService.send_event_notification(
        db_session, host.id, event.id, request(["GOING"]), sender
    )

    assert not result.success
    assert result.reason == Rejection.PARTIAL_DELIVERY_FAILURE
    assert result.failed_recipients == ["bob@example.com"]
    assert [to for to, _, _ in sender.sent] == ["ada@example.com"]

    log = db_session.query(EmailNotification).one()
    assert (log.recipient_count, log.sent_count, log.failed_count) == (2, 1, 1)

def test_other_organizer_is_refused(db_session, event_with_rsvps):
    _, other, event = event_with_rsvps
    sender = RecordingSender()

    with pytest.raises(Unauthorized):
        NotificationService.send_event_notification(db_session, other.id, event.id, request(["GOING"]), sender)
    with pytest.raises(Unauthorized):
        NotificationService.send_event_notification(db_session, other.id, 9999, request(["GOING"]), sender)

    assert sender.sent == []

def test_history_is_newest_first_and_owner_only(db_session, event_with_rsvps):
    host, other, event = event_with_rsvps
    sender = RecordingSender()
    for subject in ["First", "Second"]:
        NotificationService.send_event_notification(
            db_session, host.id, event.id, request(["GOING"], subject=subject), sender
        )

    history = NotificationService.get_notification_history(db_session, host.id, event.id)
    assert [log.subject for log in history] == ["Second", "First"]
    assert NotificationService.get_notification_history(db_session, other.id, event.id) == []
