"""Integration tests for the SQLAlchemy directory, templates, snapshots and delivery log."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import select

from core.domain.entities import ChannelOutcome, RenderedContent
from core.domain.enums import Channel, FailureReason
from core.infrastructure.database.models import (
    CandidateModel,
    ContentTemplateModel,
    GatheringModel,
    GatheringRsvpModel,
    GyldMemberModel,
    GyldModel,
    NotificationSentModel,
    UserModel,
    UserPushTokenModel,
)
from core.infrastructure.database.repositories import (
    SQLAlchemyDeliveryLog,
    SQLAlchemyEntitySnapshotSource,
    SQLAlchemyRecipientDirectory,
    SQLAlchemyTemplateRepository,
)
from tests.fakes import token


@pytest_asyncio.fixture
async def seeded_factory(test_session_factory):
    base = datetime(2030, 5, 1, 18, 30, tzinfo=timezone.utc)
    async with test_session_factory() as session:
        async with session.begin():
            session.add_all([
                UserModel(id="u1", email="u1@example.com", first_name="Ada"),
                UserModel(id="u2", email="u2@example.com", first_name="Ben"),
                UserModel(id="u3", email=None, first_name="Cy", push_enabled=False),
            ])
            await session.flush()
            session.add_all([
                UserPushTokenModel(user_id="u1", push_token=token(1)),
                UserPushTokenModel(user_id="u1", push_token=token(2)),
                UserPushTokenModel(user_id="u3", push_token=token(3)),
                GatheringModel(id="g1", title="Picnic", starts_at=base, location="Central Park"),
                GatheringModel(id="g-empty", title="Nobody"),
                GyldModel(id="gy1", name="Runners"),
                CandidateModel(id="c1", name="Jordan", status="voting"),
                ContentTemplateModel(content_key="welcome", channel=None, primary_text="Hi", secondary_text="Body"),
                ContentTemplateModel(
                    content_key="welcome",
                    channel="push",
                    primary_text="Hi {{first_name}}",
                    secondary_text="Push body",
                    default_variables={"first_name": "friend"},
                ),
            ])
            await session.flush()
            session.add_all([
                GatheringRsvpModel(gathering_id="g1", user_id="u1", status="yes", created_at=base),
                GatheringRsvpModel(gathering_id="g1", user_id="u2", status="no", created_at=base),
                GatheringRsvpModel(
                    gathering_id="g1", user_id="u3", status="yes", created_at=base + timedelta(minutes=1)
                ),
                GyldMemberModel(gyld_id="gy1", user_id="u2", joined_at=base),
                GyldMemberModel(gyld_id="gy1", user_id="u1", joined_at=base + timedelta(days=1)),
            ])
    return test_session_factory


@pytest.mark.asyncio
async def test_contacts_include_tokens_only_for_push_enabled_users(seeded_factory):
    directory = SQLAlchemyRecipientDirectory(seeded_factory)

    contacts = {c.user_id: c for c in await directory.get_contacts(["u1", "u3", "ghost"])}

    assert set(contacts) == {"u1", "u3"}
    assert contacts["u1"].push_tokens == (token(1), token(2))
    assert contacts["u1"].first_name == "Ada"
    assert contacts["u3"].push_tokens == ()
    assert contacts["u3"].email is None


@pytest.mark.asyncio
async def test_rsvp_and_membership_lookups(seeded_factory):
    directory = SQLAlchemyRecipientDirectory(seeded_factory)

    assert await directory.get_rsvp_user_ids("g1", "yes") == ["u1", "u3"]
    assert await directory.get_rsvp_user_ids("g-empty", "yes") == []
    assert await directory.get_rsvp_user_ids("missing", "yes") is None
    assert await directory.get_group_member_ids("gy1") == ["u2", "u1"]
    assert await directory.get_group_member_ids("missing") is None


@pytest.mark.asyncio
async def test_entity_snapshots(seeded_factory):
    snapshots = SQLAlchemyEntitySnapshotSource(seeded_factory)

    gathering = await snapshots.get_gathering("g1")
    candidate = await snapshots.get_candidate("c1")

    assert gathering.title == "Picnic"
    assert gathering.attendee_count == 2
    assert gathering.date == "Wednesday, May 01, 2030 at 18:30 UTC"
    assert candidate.name == "Jordan"
    assert await snapshots.get_gathering("missing") is None


@pytest.mark.asyncio
async def test_template_lookup_is_exact_on_channel(seeded_factory):
    templates = SQLAlchemyTemplateRepository(seeded_factory)

    push = await templates.get_template("welcome", "push")
    generic = await templates.get_template("welcome", None)

    assert push.primary_text == "Hi {{first_name}}"
    assert push.default_variables == {"first_name": "friend"}
    assert generic.primary_text == "Hi"
    assert await templates.get_template("welcome", "email") is None


@pytest.mark.asyncio
async def test_delivery_log_writes_sent_and_failed_rows(test_session_factory):
    outcome = ChannelOutcome(channel=Channel.PUSH, attempted=True)
    outcome.record_success("u1", "ticket-1")
    outcome.record_failure("u2", FailureReason.NO_PUSH_TOKEN.value)

    await SQLAlchemyDeliveryLog(test_session_factory).record(
        "exec-1", Channel.PUSH, RenderedContent(subject="Hi", primary_body="There"), outcome
    )

    async with test_session_factory() as session:
        rows = (await session.execute(select(NotificationSentModel))).scalars().all()

    by_status = {row.status: row for row in rows}
    assert by_status["sent"].to_address == ["u1"]
    assert by_status["failed"].to_address == ["u2"]
    assert by_status["failed"].failure_reasons == {"u2": ["NoPushToken"]}
    assert all(row.execution_id == "exec-1" and row.channel == "push" for row in rows)
