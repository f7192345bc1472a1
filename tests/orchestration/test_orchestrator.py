"""Tests for NotificationOrchestrator."""

from datetime import timedelta

import pytest

from core.application.dispatchers import ChannelDispatcher
from core.domain.entities import ContentTemplate
from core.domain.enums import Channel, FailureReason, OrchestrationMode, OrchestrationState, WorkflowStatus
from core.domain.errors import InvalidRequest, TemplateNotFound, UnknownScope
from core.domain.value_objects import MembershipRecipients, TemplateContent
from gyld_sdk.utils.datetime import utc_now
from orchestration import FINISHED, RECIPIENT_FAILED, SCHEDULED, STATE_CHANGED
from tests.fakes import make_request, token


def _states(event_bus):
    return [e.payload["state"] for e in event_bus.events if e.name == STATE_CHANGED]


@pytest.mark.asyncio
async def test_both_mode_reports_partial_push_and_full_email(orchestrator, directory, push_gateway, email_gateway):
    directory.add_user("u1", email="u1@example.com", push_tokens=[token(1)])
    directory.add_user("u2", email="u2@example.com")

    result = await orchestrator.execute(make_request(["u1", "u2"], mode=OrchestrationMode.BOTH))

    assert result.success
    assert result.state == OrchestrationState.DONE
    assert result.push.succeeded_count == 1
    assert [(f.user_id, f.reason) for f in result.push.failures] == [("u2", FailureReason.NO_PUSH_TOKEN.value)]
    assert result.email.succeeded_count == 2
    assert result.email.failures == []
    assert len(push_gateway.messages) == 1
    assert len(email_gateway.emails[0].personalizations) == 2


@pytest.mark.asyncio
async def test_state_transitions_in_order(orchestrator, directory, event_bus):
    directory.add_user("u1", email="u1@example.com")

    await orchestrator.execute(make_request(["u1"]))

    assert _states(event_bus) == [
        "validating",
        "resolving_recipients",
        "rendering_content",
        "dispatching",
        "aggregating",
        "done",
    ]
    assert event_bus.names()[-1] == FINISHED


@pytest.mark.asyncio
async def test_push_preferred_skips_email_when_push_succeeds(orchestrator, directory, email_gateway):
    directory.add_user("u1", email="u1@example.com", push_tokens=[token(1)])
    directory.add_user("u2", email="u2@example.com")

    result = await orchestrator.execute(make_request(["u1", "u2"], mode=OrchestrationMode.PUSH_PREFERRED))

    assert result.push.succeeded_count == 1
    assert not result.email.attempted
    assert email_gateway.emails == []


@pytest.mark.asyncio
async def test_push_preferred_falls_back_to_email_for_recipients_with_address(
    orchestrator, directory, push_gateway, email_gateway
):
    directory.add_user("u1", email="u1@example.com", push_tokens=["garbage"])
    directory.add_user("u2")
    directory.add_user("u3", email="u3@example.com")

    result = await orchestrator.execute(make_request(["u1", "u2", "u3"], mode=OrchestrationMode.PUSH_PREFERRED))

    assert result.push.attempted
    assert result.push.succeeded_count == 0
    assert push_gateway.batches == []
    assert result.email.attempted
    assert [p.user_id for p in email_gateway.emails[0].personalizations] == ["u1", "u3"]
    assert result.email.succeeded_count == 2
    assert result.success


@pytest.mark.asyncio
async def test_unknown_users_are_reported_as_unresolved(orchestrator, directory, event_bus):
    directory.add_user("u1", email="u1@example.com")

    result = await orchestrator.execute(make_request(["u1", "ghost"]))

    assert [(f.user_id, f.reason) for f in result.unresolved] == [("ghost", FailureReason.UNKNOWN_USER.value)]
    failed_events = [e for e in event_bus.events if e.name == RECIPIENT_FAILED]
    assert any(e.payload["user_id"] == "ghost" for e in failed_events)


@pytest.mark.asyncio
async def test_empty_audience_dispatches_nothing(orchestrator, directory, push_gateway, email_gateway):
    directory.add_group("quiet-gyld")

    result = await orchestrator.execute(make_request(recipients=MembershipRecipients(group_id="quiet-gyld")))

    assert not result.success
    assert result.state == OrchestrationState.DONE
    assert result.message == "No recipients resolved"
    assert not result.push.attempted
    assert not result.email.attempted
    assert push_gateway.batches == []
    assert email_gateway.emails == []


@pytest.mark.asyncio
async def test_missing_template_fails_before_resolving_recipients(orchestrator, directory, event_bus):
    request = make_request(["u1"], content=TemplateContent(template_key="missing_template"))

    with pytest.raises(TemplateNotFound):
        await orchestrator.execute(request)

    assert directory.calls == []
    assert _states(event_bus) == ["validating", "failed"]
    finished = [e for e in event_bus.events if e.name == FINISHED]
    assert finished[-1].payload["success"] is False


@pytest.mark.asyncio
async def test_unknown_scope_propagates(orchestrator):
    with pytest.raises(UnknownScope):
        await orchestrator.execute(make_request(recipients=MembershipRecipients(group_id="nope")))


@pytest.mark.asyncio
async def test_templated_content_is_rendered_per_channel(orchestrator, directory, templates, push_gateway, email_gateway):
    directory.add_user("u1", email="u1@example.com", push_tokens=[token(1)])
    templates.add(ContentTemplate(content_key="hello", primary_text="Hi {{name}}", secondary_text="push body", channel="push"))
    templates.add(ContentTemplate(content_key="hello", primary_text="Hello {{name}}", secondary_text="email body"))

    await orchestrator.execute(
        make_request(["u1"], content=TemplateContent(template_key="hello", variables={"name": "Sam"}))
    )

    assert push_gateway.messages[0].title == "Hi Sam"
    assert email_gateway.emails[0].subject == "Hello Sam"


@pytest.mark.asyncio
async def test_dispatcher_crash_becomes_channel_failures(orchestrator, directory, email_gateway):
    class ExplodingDispatcher(ChannelDispatcher):
        channel = Channel.PUSH

        async def send(self, content, recipients, decoration, context):
            raise RuntimeError("boom")

    orchestrator._push = ExplodingDispatcher()
    directory.add_user("u1", email="u1@example.com", push_tokens=[token(1)])

    result = await orchestrator.execute(make_request(["u1"], mode=OrchestrationMode.BOTH))

    assert result.push.error == "boom"
    assert [(f.user_id, f.reason) for f in result.push.failures] == [("u1", FailureReason.CHANNEL_SEND_ERROR.value)]
    assert result.email.succeeded_count == 1
    assert result.success


@pytest.mark.asyncio
async def test_delivery_log_records_sent_and_failed(orchestrator, directory, delivery_log):
    directory.add_user("u1", email="u1@example.com", push_tokens=[token(1)])
    directory.add_user("u2", email="u2@example.com")

    result = await orchestrator.execute(make_request(["u1", "u2"], mode=OrchestrationMode.BOTH))

    rows = {(e["channel"], e["status"]): e["to_address"] for e in delivery_log.entries}
    assert rows[("push", "sent")] == ["u1"]
    assert rows[("push", "failed")] == ["u2"]
    assert rows[("email", "sent")] == ["u1", "u2"]
    assert all(e["execution_id"] == result.execution_id for e in delivery_log.entries)


def test_validate_payload_rejects_both_content_kinds(orchestrator):
    payload = {
        "mode": "both",
        "recipients": {"type": "user_ids", "user_ids": ["u1"]},
        "title": "Hi",
        "body": "There",
        "template_key": "welcome",
        "initiated_by": "host-1",
    }

    with pytest.raises(InvalidRequest):
        orchestrator.validate_payload(payload)


def test_validate_payload_rejects_missing_content(orchestrator):
    payload = {"mode": "both", "recipients": {"type": "user_ids", "user_ids": ["u1"]}, "initiated_by": "host-1"}

    with pytest.raises(InvalidRequest):
        orchestrator.validate_payload(payload)


@pytest.mark.asyncio
async def test_future_request_is_scheduled_not_sent(
    orchestrator, directory, workflow_repository, push_gateway, email_gateway, event_bus
):
    directory.add_user("u1", email="u1@example.com", push_tokens=[token(1)])
    request = make_request(["u1"], scheduled_for=utc_now() + timedelta(hours=2), gathering_id="g1")

    result = await orchestrator.send(request)

    assert result.success
    assert result.workflow_id is not None
    pending = await workflow_repository.list_by_status(WorkflowStatus.PENDING)
    assert [r.id for r in pending] == [result.workflow_id]
    assert pending[0].kind == "orchestration_both"
    assert pending[0].gathering_id == "g1"
    assert push_gateway.batches == []
    assert email_gateway.emails == []
    assert directory.calls == []
    assert event_bus.names() == [SCHEDULED]


@pytest.mark.asyncio
async def test_past_schedule_executes_immediately(orchestrator, directory, workflow_repository):
    directory.add_user("u1", email="u1@example.com")
    request = make_request(["u1"], scheduled_for=utc_now() - timedelta(minutes=1))

    result = await orchestrator.send(request)

    assert result.email.succeeded_count == 1
    assert await workflow_repository.list_by_status(WorkflowStatus.PENDING) == []
