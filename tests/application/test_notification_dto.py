"""Tests for request parsing and snapshots."""

from datetime import timezone

import pytest

from core.application.dtos import parse_notification_request, request_snapshot
from core.domain.enums import OrchestrationMode
from core.domain.errors import InvalidRequest
from tests.fakes import make_request
from core.domain.value_objects import LiteralContent, RsvpRecipients, TemplateContent


def _payload(**overrides):
    payload = {
        "mode": "push_preferred",
        "recipients": {"type": "rsvp_list", "gathering_id": "g-42"},
        "template_key": "gathering_reminder",
        "variables": {"first_name": "Sam", "count": 3},
        "gathering_id": "g-42",
        "initiated_by": "host-7",
    }
    payload.update(overrides)
    return payload


def test_parse_templated_rsvp_request():
    request = parse_notification_request(_payload())

    assert request.mode == OrchestrationMode.PUSH_PREFERRED
    assert request.recipients == RsvpRecipients(gathering_id="g-42", rsvp_status="yes")
    assert isinstance(request.content, TemplateContent)
    assert request.content.gathering_id == "g-42"
    assert dict(request.content.variables) == {"first_name": "Sam", "count": 3}


def test_parse_literal_request_with_decoration():
    payload = _payload(
        recipients={"type": "user_ids", "user_ids": ["u1"]},
        template_key=None,
        variables={},
        title="Heads up",
        body="Starting soon",
        deep_link="gyld://gatherings/g-42",
        buttons=[{"text": "Open", "url": "https://app.gyld.org"}],
        email={"email_type": "reminder"},
    )

    request = parse_notification_request(payload)

    assert request.content == LiteralContent(title="Heads up", body="Starting soon")
    assert request.decoration.deep_link == "gyld://gatherings/g-42"
    assert request.decoration.primary_button.text == "Open"
    assert request.decoration.email.email_type == "reminder"


def test_naive_schedule_is_treated_as_utc():
    request = parse_notification_request(_payload(scheduled_for="2030-01-01T09:00:00"))

    assert request.scheduled_for.tzinfo == timezone.utc


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "Hi", "body": "There"},
        {"template_key": None},
        {"buttons": [{"text": str(i), "url": "https://x"} for i in range(4)]},
        {"recipients": {"type": "rsvp_list", "gathering_id": "g-42", "rsvp_status": "later"}},
        {"recipients": {"type": "user_ids", "user_ids": []}},
        {"mode": "sms"},
        {"initiated_by": ""},
        {"unexpected": True},
        {"subtitle": "Bring snacks"},
        {"secondary_body": "See you there"},
        {"template_key": None, "title": "Hi", "body": "There", "template_gathering_id": "g-42"},
    ],
)
def test_invalid_payloads_raise_invalid_request(overrides):
    with pytest.raises(InvalidRequest):
        parse_notification_request(_payload(**overrides))


def test_non_object_payload_is_invalid():
    with pytest.raises(InvalidRequest):
        parse_notification_request(["not", "an", "object"])


def test_snapshot_parses_back_to_the_same_request():
    request = parse_notification_request(_payload(scheduled_for="2030-01-01T09:00:00Z"))

    assert parse_notification_request(request_snapshot(request)) == request


@pytest.mark.parametrize(
    "content, gathering_id",
    [
        (TemplateContent(template_key="reminder", gathering_id="g1"), None),
        (TemplateContent(template_key="reminder", variables={"first_name": "Sam"}), "g2"),
        (TemplateContent(template_key="vote", candidate_id="c1"), "g2"),
    ],
)
def test_snapshot_keeps_template_entities_apart_from_the_associated_gathering(content, gathering_id):
    request = make_request(content=content, gathering_id=gathering_id)

    restored = parse_notification_request(request_snapshot(request))

    assert restored.content == content
    assert restored.gathering_id == gathering_id


def test_template_entities_default_to_the_associated_ids():
    request = parse_notification_request(_payload(candidate_id="c-9"))

    assert request.content.gathering_id == "g-42"
    assert request.content.candidate_id == "c-9"


def test_explicit_template_entity_overrides_the_associated_gathering():
    request = parse_notification_request(_payload(template_gathering_id="g-7"))

    assert request.content.gathering_id == "g-7"
    assert request.gathering_id == "g-42"
