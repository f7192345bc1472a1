"""Tests for RecipientResolver."""

import asyncio

import pytest

from core.application.services import RecipientResolver
from core.domain.entities import UserContact
from core.domain.errors import DataSourceUnavailable, UnknownScope
from core.domain.value_objects import ExplicitRecipients, MembershipRecipients, RsvpRecipients
from core.infrastructure.adapters.persistence import InMemoryRecipientDirectory
from tests.fakes import token


@pytest.mark.asyncio
async def test_explicit_ids_resolve_in_order_without_duplicates(directory):
    directory.add_user("u1", email="u1@example.com", push_tokens=[token(1)])
    directory.add_user("u2", email="u2@example.com")

    resolver = RecipientResolver(directory)
    resolution = await resolver.resolve(ExplicitRecipients(user_ids=("u2", "u1", "u2")))

    assert resolution.user_ids == ["u2", "u1"]
    assert resolution.unknown_user_ids == ()
    assert resolution.recipients[1].push_tokens == (token(1),)
    assert not resolution.recipients[0].has_push


@pytest.mark.asyncio
async def test_unknown_user_ids_are_reported(directory):
    directory.add_user("u1", email="u1@example.com")

    resolution = await RecipientResolver(directory).resolve(ExplicitRecipients(user_ids=("u1", "ghost")))

    assert resolution.user_ids == ["u1"]
    assert resolution.unknown_user_ids == ("ghost",)


@pytest.mark.asyncio
async def test_rsvp_list_filters_by_status(directory):
    for user_id in ("a", "b", "c"):
        directory.add_user(user_id, email=f"{user_id}@example.com")
    directory.add_gathering("g1", rsvps=[("a", "yes"), ("b", "no"), ("c", "yes")])

    resolution = await RecipientResolver(directory).resolve(RsvpRecipients(gathering_id="g1", rsvp_status="yes"))

    assert resolution.user_ids == ["a", "c"]


@pytest.mark.asyncio
async def test_empty_scope_resolves_to_no_recipients(directory):
    directory.add_group("empty-gyld")

    resolution = await RecipientResolver(directory).resolve(MembershipRecipients(group_id="empty-gyld"))

    assert resolution.is_empty
    assert "get_contacts" not in directory.calls


@pytest.mark.asyncio
async def test_unknown_gathering_raises_unknown_scope(directory):
    with pytest.raises(UnknownScope) as exc_info:
        await RecipientResolver(directory).resolve(RsvpRecipients(gathering_id="missing"))

    assert exc_info.value.scope == "gathering"
    assert exc_info.value.scope_id == "missing"


@pytest.mark.asyncio
async def test_unknown_group_raises_unknown_scope(directory):
    with pytest.raises(UnknownScope):
        await RecipientResolver(directory).resolve(MembershipRecipients(group_id="missing"))


@pytest.mark.asyncio
async def test_duplicate_contacts_merge_endpoints():
    class DuplicatingDirectory(InMemoryRecipientDirectory):
        async def get_contacts(self, user_ids):
            contacts = await super().get_contacts(user_ids)
            return contacts + [UserContact(user_id="u1", push_tokens=(token(2),))]

    dup = DuplicatingDirectory()
    dup.add_user("u1", email="u1@example.com", push_tokens=[token(1)])

    resolution = await RecipientResolver(dup).resolve(ExplicitRecipients(user_ids=("u1",)))

    assert len(resolution) == 1
    recipient = resolution.recipients[0]
    assert recipient.push_tokens == (token(1), token(2))
    assert recipient.email == "u1@example.com"


@pytest.mark.asyncio
async def test_directory_failure_raises_data_source_unavailable(directory):
    async def broken(user_ids):
        raise RuntimeError("connection refused")

    directory.get_contacts = broken

    with pytest.raises(DataSourceUnavailable):
        await RecipientResolver(directory).resolve(ExplicitRecipients(user_ids=("u1",)))


@pytest.mark.asyncio
async def test_directory_timeout_raises_data_source_unavailable(directory):
    async def slow(group_id):
        await asyncio.sleep(1)
        return []

    directory.get_group_member_ids = slow

    with pytest.raises(DataSourceUnavailable):
        await RecipientResolver(directory, lookup_timeout=0.01).resolve(MembershipRecipients(group_id="g"))
