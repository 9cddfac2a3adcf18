"""
Tests for RSVP reconciliation and capacity enforcement
"""

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from eventrsvp.core.config import settings
from eventrsvp.core.db import Base
from eventrsvp.models import Event, Organizer, Rsvp, RsvpStatus, RsvpUser
from eventrsvp.schemas.rsvp import RsvpCreate
from eventrsvp.services.errors import NotFound, Rejection
from eventrsvp.services.repositories import RsvpRepo
from eventrsvp.services.rsvp_service import RsvpService, RequestIdentity, SubmitOutcome

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_rsvp_service.db"
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

@pytest.fixture
def organizer(db_session):
    organizer = Organizer(email="host@example.com", name="Host")
    db_session.add(organizer)
    db_session.commit()
    return organizer

def make_event(db_session, organizer, capacity=None, slug="PARTY1"):
    event = Event(
        slug=slug,
        title="Summer Party",
        date_time=datetime(2030, 7, 1, 18, 0),
        location="Rooftop",
        capacity=capacity,
        organizer_id=organizer.id,
    )
    db_session.add(event)
    db_session.commit()
    db_session.refresh(event)
    return event

def rsvp_form(status="GOING", email=None, first_name="Ada", last_initial="l"):
    return RsvpCreate(first_name=first_name, last_initial=last_initial, email=email, status=status)

def submit(db_session, event, session_token, **form):
    return RsvpService.submit_response(
        db_session, event.id, RequestIdentity(session_token=session_token), rsvp_form(**form)
    )

def going_rows(db_session, event):
    return RsvpRepo.count_going(db_session, event.id)

def test_first_going_submission_creates_and_takes_a_seat(db_session, organizer):
    event = make_event(db_session, organizer, capacity=3)

    result = submit(db_session, event, "session-a")

    assert result.success
    assert result.outcome == SubmitOutcome.CREATED
    assert result.rsvp.last_initial == "L"
    assert result.rsvp.session_token == "session-a"
    assert going_rows(db_session, event) == 1
    db_session.refresh(event)
    assert event.going_count == 1

def test_going_is_rejected_when_event_is_full(db_session, organizer):
    event = make_event(db_session, organizer, capacity=2)
    submit(db_session, event, "session-a")
    submit(db_session, event, "session-b")

    result = submit(db_session, event, "session-c")

    assert not result.success
    assert result.outcome == SubmitOutcome.REJECTED
    assert result.reason == Rejection.CAPACITY_EXCEEDED
    assert db_session.query(Rsvp).filter(Rsvp.session_token == "session-c").count() == 0
    assert going_rows(db_session, event) == 2

def test_non_going_statuses_ignore_capacity(db_session, organizer):
    event = make_event(db_session, organizer, capacity=1)
    submit(db_session, event, "session-a")

    result = submit(db_session, event, "session-b", status="MAYBE")

    assert result.outcome == SubmitOutcome.CREATED
    assert result.rsvp.status == RsvpStatus.MAYBE

def test_unlimited_event_never_rejects(db_session, organizer):
    event = make_event(db_session, organizer, capacity=None)

    for i in range(5):
        assert submit(db_session, event, f"session-{i}").outcome == SubmitOutcome.CREATED

    assert going_rows(db_session, event) == 5

def test_same_session_updates_instead_of_duplicating(db_session, organizer):
    event = make_event(db_session, organizer)
    first = submit(db_session, event, "session-a", status="MAYBE")

    second = submit(db_session, event, "session-a", status="NOT_GOING", first_name="  Grace ")

    assert second.outcome == SubmitOutcome.UPDATED
    assert second.is_update
    assert second.rsvp.id == first.rsvp.id
    assert second.rsvp.first_name == "Grace"
    assert db_session.query(Rsvp).filter(Rsvp.event_id == event.id).count() == 1

def test_same_email_from_new_device_matches_existing_row(db_session, organizer):
    event = make_event(db_session, organizer)
    first = submit(db_session, event, "laptop", email="ada@example.com", status="MAYBE")

    second = submit(db_session, event, "phone", email="ADA@example.com", status="NOT_GOING")

    assert second.outcome == SubmitOutcome.UPDATED
    assert second.rsvp.id == first.rsvp.id
    # Rebound so the phone is recognised next time
    assert second.rsvp.session_token == "phone"
    assert RsvpService.get_rsvp_for_session(db_session, event.id, "phone").id == first.rsvp.id
    assert RsvpService.get_rsvp_for_session(db_session, event.id, "laptop") is None

def test_session_match_wins_and_absorbs_email_duplicate(db_session, organizer):
    event = make_event(db_session, organizer, capacity=5)
    laptop = submit(db_session, event, "laptop", email="ada@example.com")
    phone = submit(db_session, event, "phone", status="MAYBE")

    result = submit(db_session, event, "phone", email="ada@example.com", status="GOING")

    assert result.outcome == SubmitOutcome.UPDATED
    assert result.rsvp.id == phone.rsvp.id
    assert result.rsvp.email == "ada@example.com"
    assert db_session.query(Rsvp).filter(Rsvp.id == laptop.rsvp.id).first() is None
    assert db_session.query(Rsvp).filter(Rsvp.event_id == event.id).count() == 1
    db_session.refresh(event)
    assert event.going_count == 1

def test_downgrade_from_going_releases_seat(db_session, organizer):
    event = make_event(db_session, organizer, capacity=1)
    submit(db_session, event, "session-a")

    submit(db_session, event, "session-a", status="NOT_GOING")
    result = submit(db_session, event, "session-b")

    assert result.outcome == SubmitOutcome.CREATED
    db_session.refresh(event)
    assert event.going_count == 1

def test_going_to_going_update_keeps_its_seat_on_full_event(db_session, organizer):
    event = make_event(db_session, organizer, capacity=1)
    submit(db_session, event, "session-a")

    result = submit(db_session, event, "session-a", first_name="Ada Lovelace")

    assert result.outcome == SubmitOutcome.UPDATED
    db_session.refresh(event)
    assert event.going_count == 1

def test_switch_to_going_is_capacity_checked(db_session, organizer):
    event = make_event(db_session, organizer, capacity=1)
    maybe = submit(db_session, event, "session-a", status="MAYBE")
    submit(db_session, event, "session-b")

    result = submit(db_session, event, "session-a", status="GOING")

    assert result.reason == Rejection.CAPACITY_EXCEEDED
    db_session.expire_all()
    stored = db_session.query(Rsvp).filter(Rsvp.id == maybe.rsvp.id).one()
    assert stored.status == RsvpStatus.MAYBE

def test_switch_to_going_without_recheck(db_session, organizer, monkeypatch):
    monkeypatch.setattr(settings, "RECHECK_CAPACITY_ON_UPDATE", False)
    event = make_event(db_session, organizer, capacity=1)
    submit(db_session, event, "session-a", status="MAYBE")
    submit(db_session, event, "session-b")

    result = submit(db_session, event, "session-a", status="GOING")

    assert result.outcome == SubmitOutcome.UPDATED
    assert going_rows(db_session, event) == 2

def test_unknown_event_raises_not_found(db_session):
    with pytest.raises(NotFound):
        RsvpService.submit_response(
            db_session, 9999, RequestIdentity(session_token="s"), rsvp_form()
        )

def test_verified_identity_claims_matching_email(db_session, organizer):
    event = make_event(db_session, organizer)
    user = RsvpUser(email="ada@example.com", email_verified=datetime(2030, 1, 1))
    db_session.add(user)
    db_session.commit()

    identity = RequestIdentity(session_token="s1", rsvp_user_id=user.id, verified_email=user.email)
    result = RsvpService.submit_response(db_session, event.id, identity, rsvp_form(email="ada@example.com"))

    assert result.rsvp.rsvp_user_id == user.id

def test_list_user_rsvps_orders_by_event_date(db_session, organizer):
    later = make_event(db_session, organizer, slug="LATER")
    sooner = Event(slug="SOONER", title="Brunch", date_time=datetime(2030, 1, 1), location="Cafe", organizer_id=organizer.id)
    db_session.add(sooner)
    user = RsvpUser(email="ada@example.com")
    db_session.add(user)
    db_session.commit()
    for event in (later, sooner):
        db_session.add(Rsvp(event_id=event.id, first_name="Ada", last_initial="L",
                            email=user.email, status=RsvpStatus.GOING,
                            session_token=f"s-{event.slug}", rsvp_user_id=user.id))
    db_session.commit()

    rows = RsvpService.list_user_rsvps(db_session, user.id)

    assert [r["event_slug"] for r in rows] == ["SOONER", "LATER"]
