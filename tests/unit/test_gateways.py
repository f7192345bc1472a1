"""Tests for the Expo and SendGrid gateway adapters."""

import pytest

from core.application.interfaces import EmailPersonalization, PushMessage, TemplatedEmail
from core.infrastructure.adapters.notifications import MockEmailGateway, MockPushGateway
from core.infrastructure.adapters.notifications.expo_push_gateway import (
    ExpoPushGateway,
    to_expo_message,
    to_push_ticket,
)
from core.infrastructure.adapters.notifications.sendgrid_email_gateway import SendGridEmailGateway
from core.settings.sections import EmailSettings, PushSettings
from gyld_sdk.errors import SendGridAPIError
from gyld_sdk.sendgrid import SendGridResponse


class FakeExpoClient:
    def __init__(self, tickets):
        self.tickets = tickets
        self.sent = []

    async def send_push_notifications(self, messages):
        self.sent.append(messages)
        return self.tickets


class FakeSendGridClient:
    def __init__(self, error=None):
        self.error = error
        self.payloads = []

    async def send(self, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return SendGridResponse(status=202, message_id="sg-1")


def _email(template_name="basic_with_button"):
    return TemplatedEmail(
        template_name=template_name,
        email_type="notification",
        from_email="noreply@gyld.org",
        from_name="Gyld",
        reply_to="noreply@gyld.org",
        subject="Picnic",
        body="Bring snacks",
        personalizations=[EmailPersonalization(email="a@example.com", user_id="u1", first="Ada")],
        button_text="RSVP",
        button_url="https://app.gyld.org/g/1",
    )


def test_to_expo_message_includes_optional_fields_only_when_set():
    plain = to_expo_message(PushMessage(to="ExponentPushToken[a]", title="T", body="B"))
    rich = to_expo_message(
        PushMessage(to="ExponentPushToken[a]", title="T", body="B", subtitle="S", image_url="https://x/logo.png")
    )

    assert plain == {
        "to": "ExponentPushToken[a]",
        "title": "T",
        "body": "B",
        "data": {},
        "sound": "default",
        "priority": "high",
    }
    assert rich["subtitle"] == "S"
    assert rich["richContent"] == {"image": "https://x/logo.png"}


def test_to_push_ticket_reads_error_details():
    ok = to_push_ticket({"status": "ok", "id": "abc"})
    error = to_push_ticket(
        {"status": "error", "message": "not registered", "details": {"error": "DeviceNotRegistered"}}
    )

    assert (ok.status, ok.id, ok.error_code) == ("ok", "abc", None)
    assert (error.status, error.error_code) == ("error", "DeviceNotRegistered")


@pytest.mark.asyncio
async def test_expo_gateway_maps_messages_and_tickets():
    client = FakeExpoClient([{"status": "ok", "id": "t1"}, {"status": "error", "details": {"error": "MessageTooBig"}}])
    gateway = ExpoPushGateway(PushSettings(), client=client)

    tickets = await gateway.send_batch(
        [
            PushMessage(to="ExponentPushToken[a]", title="T", body="B"),
            PushMessage(to="ExponentPushToken[b]", title="T", body="B"),
        ]
    )

    assert [m["to"] for m in client.sent[0]] == ["ExponentPushToken[a]", "ExponentPushToken[b]"]
    assert [t.status for t in tickets] == ["ok", "error"]
    assert tickets[1].error_code == "MessageTooBig"


@pytest.mark.asyncio
async def test_sendgrid_gateway_uses_configured_template_id():
    client = FakeSendGridClient()
    gateway = SendGridEmailGateway(EmailSettings(template_ids={"basic_with_button": "d-abc"}), client=client)

    receipt = await gateway.send(_email())

    assert receipt.accepted is True
    assert receipt.message_id == "sg-1"
    payload = client.payloads[0]
    assert payload["template_id"] == "d-abc"
    data = payload["personalizations"][0]["dynamic_template_data"]
    assert data["first"] == "Ada"
    assert data["buttonurl"] == "https://app.gyld.org/g/1"


def test_sendgrid_gateway_without_template_id_builds_html():
    gateway = SendGridEmailGateway(EmailSettings(), client=FakeSendGridClient())

    payload = gateway.build_payload(_email(template_name="unknown"))

    assert "template_id" not in payload
    assert payload["content"][1]["type"] == "text/html"


@pytest.mark.asyncio
async def test_sendgrid_client_error_becomes_rejected_receipt():
    error = SendGridAPIError("bad", status=400, errors=[{"message": "invalid from address"}])
    gateway = SendGridEmailGateway(EmailSettings(), client=FakeSendGridClient(error=error))

    receipt = await gateway.send(_email())

    assert receipt.accepted is False
    assert receipt.error_code == "ProviderRejected"
    assert receipt.error_message == "invalid from address"


@pytest.mark.asyncio
async def test_sendgrid_server_error_propagates():
    gateway = SendGridEmailGateway(
        EmailSettings(), client=FakeSendGridClient(error=SendGridAPIError("down", status=503))
    )

    with pytest.raises(SendGridAPIError):
        await gateway.send(_email())


@pytest.mark.asyncio
async def test_mock_gateways_acknowledge_everything():
    push = MockPushGateway()
    email = MockEmailGateway()

    tickets = await push.send_batch([PushMessage(to="ExponentPushToken[a]", title="T", body="B")] * 2)
    receipt = await email.send(_email())

    assert [t.id for t in tickets] == ["mock-ticket-0", "mock-ticket-1"]
    assert receipt.accepted and email.emails
