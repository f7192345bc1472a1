"""Tests for ContentTemplateResolver and placeholder rendering."""

import asyncio

import pytest

from core.application.interfaces import CandidateSnapshot, GatheringSnapshot
from core.application.services import ContentTemplateResolver, find_placeholders, render_text
from core.domain.entities import ContentTemplate
from core.domain.enums import Channel
from core.domain.errors import FailedContent, TemplateNotFound
from core.domain.value_objects import LiteralContent, TemplateContent


def test_render_text_substitutes_known_variables():
    assert render_text("Hi {{first_name}}, see you at {{ place }}", {"first_name": "Sam", "place": "the park"}) == (
        "Hi Sam, see you at the park"
    )


def test_render_text_keeps_unresolved_placeholders():
    assert render_text("Hi {{first_name}} {{last_name}}", {"first_name": "Sam"}) == "Hi Sam {{last_name}}"


def test_render_text_formats_whole_floats_as_integers():
    assert render_text("{{count}} going", {"count": 12.0}) == "12 going"


def test_find_placeholders_lists_each_name_once():
    assert find_placeholders("{{a}} {{b}} {{a}}") == ["a", "b"]


@pytest.mark.asyncio
async def test_literal_content_maps_subtitle_for_push_and_secondary_body_for_email(templates, snapshots):
    resolver = ContentTemplateResolver(templates, snapshots)
    content = LiteralContent(title="Title", body="Body", subtitle="Sub", secondary_body="More")

    rendered = await resolver.render_all(content, [Channel.PUSH, Channel.EMAIL])

    assert rendered[Channel.PUSH].subject == "Title"
    assert rendered[Channel.PUSH].secondary_body == "Sub"
    assert rendered[Channel.EMAIL].primary_body == "Body"
    assert rendered[Channel.EMAIL].secondary_body == "More"


@pytest.mark.asyncio
async def test_channel_specific_template_beats_generic(templates, snapshots):
    templates.add(ContentTemplate(content_key="welcome", primary_text="Generic", secondary_text="body"))
    templates.add(
        ContentTemplate(content_key="welcome", primary_text="Push title", secondary_text="body", channel="push")
    )
    resolver = ContentTemplateResolver(templates, snapshots)

    rendered = await resolver.render_all(TemplateContent(template_key="welcome"), [Channel.PUSH, Channel.EMAIL])

    assert rendered[Channel.PUSH].subject == "Push title"
    assert rendered[Channel.EMAIL].subject == "Generic"


@pytest.mark.asyncio
async def test_missing_template_raises_template_not_found(templates, snapshots):
    resolver = ContentTemplateResolver(templates, snapshots)

    with pytest.raises(TemplateNotFound) as exc_info:
        await resolver.load_templates(TemplateContent(template_key="missing_template"), [Channel.PUSH])

    assert exc_info.value.template_key == "missing_template"


@pytest.mark.asyncio
async def test_variable_precedence_explicit_then_entity_then_defaults(templates, snapshots):
    templates.add(
        ContentTemplate(
            content_key="reminder",
            primary_text="{{gathering_title}}",
            secondary_text="{{attendee_count}} going to {{gathering_location}}, hosted by {{host}}",
            default_variables={"host": "the team", "gathering_location": "TBD", "gathering_title": "Meetup"},
        )
    )
    snapshots.gatherings["g1"] = GatheringSnapshot(
        gathering_id="g1", title="Picnic", location="Central Park", attendee_count=7
    )
    resolver = ContentTemplateResolver(templates, snapshots)
    content = TemplateContent(template_key="reminder", variables={"host": "Alex"}, gathering_id="g1")

    rendered = await resolver.render(content, Channel.EMAIL)

    assert rendered.subject == "Picnic"
    assert rendered.primary_body == "7 going to Central Park, hosted by Alex"


@pytest.mark.asyncio
async def test_missing_entity_value_falls_back_to_default(templates, snapshots):
    templates.add(
        ContentTemplate(
            content_key="reminder",
            primary_text="At {{gathering_location}}",
            secondary_text="body",
            default_variables={"gathering_location": "TBD"},
        )
    )
    snapshots.gatherings["g1"] = GatheringSnapshot(gathering_id="g1", title="Picnic", location=None)
    resolver = ContentTemplateResolver(templates, snapshots)

    rendered = await resolver.render(TemplateContent(template_key="reminder", gathering_id="g1"), Channel.PUSH)

    assert rendered.subject == "At TBD"


@pytest.mark.asyncio
async def test_candidate_variables_are_available(templates, snapshots):
    templates.add(ContentTemplate(content_key="vote", primary_text="Vote on {{candidate_name}}", secondary_text="x"))
    snapshots.candidates["c1"] = CandidateSnapshot(candidate_id="c1", name="Jordan", status="pending")
    resolver = ContentTemplateResolver(templates, snapshots)

    rendered = await resolver.render(TemplateContent(template_key="vote", candidate_id="c1"), Channel.PUSH)

    assert rendered.subject == "Vote on Jordan"


@pytest.mark.asyncio
async def test_unknown_entity_raises_failed_content(templates, snapshots):
    templates.add(ContentTemplate(content_key="reminder", primary_text="{{gathering_title}}", secondary_text="x"))
    resolver = ContentTemplateResolver(templates, snapshots)

    with pytest.raises(FailedContent):
        await resolver.render(TemplateContent(template_key="reminder", gathering_id="nope"), Channel.PUSH)


@pytest.mark.asyncio
async def test_template_store_timeout_raises_failed_content(templates, snapshots):
    async def slow(content_key, channel):
        await asyncio.sleep(1)

    templates.get_template = slow
    resolver = ContentTemplateResolver(templates, snapshots, lookup_timeout=0.01)

    with pytest.raises(FailedContent):
        await resolver.render(TemplateContent(template_key="any"), Channel.PUSH)
