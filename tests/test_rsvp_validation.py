"""
Tests for respondent form validation
"""

import pytest
from pydantic import ValidationError

from eventrsvp.models import RsvpStatus
from eventrsvp.schemas.auth import NotificationRequest
from eventrsvp.schemas.rsvp import RsvpCreate

def make(**overrides):
    data = {"first_name": "Ada", "last_initial": "L", "status": "GOING"}
    data.update(overrides)
    return RsvpCreate(**data)

@pytest.mark.parametrize("raw", ["l", "L", " q "])
def test_last_initial_normalized_to_uppercase(raw):
    assert make(last_initial=raw).last_initial == raw.strip().upper()

@pytest.mark.parametrize("raw", ["1", "-", "", "Lo", "é"])
def test_last_initial_must_be_one_letter(raw):
    with pytest.raises(ValidationError):
        make(last_initial=raw)

def test_first_name_is_trimmed():
    assert make(first_name="  Grace  ").first_name == "Grace"

def test_first_name_required_and_bounded():
    with pytest.raises(ValidationError):
        make(first_name="   ")
    with pytest.raises(ValidationError):
        make(first_name="x" * 51)
    assert make(first_name="x" * 50).first_name == "x" * 50

def test_blank_email_becomes_absent():
    assert make(email="").email is None
    assert make(email="   ").email is None
    assert make().email is None

def test_email_is_validated_and_lowercased():
    assert make(email="Ada@Example.com").email == "ada@example.com"
    with pytest.raises(ValidationError):
        make(email="not-an-email")

def test_status_must_be_known():
    assert make(status="INTERESTED_IN_FUTURE").status == RsvpStatus.INTERESTED_IN_FUTURE
    with pytest.raises(ValidationError):
        make(status="SOMETIMES")

def test_notification_request_limits():
    ok = NotificationRequest(subject="Hi", body="See you", statuses=["GOING", "GOING", "MAYBE"])
    assert ok.statuses == [RsvpStatus.GOING, RsvpStatus.MAYBE]

    with pytest.raises(ValidationError):
        NotificationRequest(subject="x" * 201, body="b", statuses=["GOING"])
    with pytest.raises(ValidationError):
        NotificationRequest(subject="s", body="b" * 5001, statuses=["GOING"])
    with pytest.raises(ValidationError):
        NotificationRequest(subject="s", body="b", statuses=[])
