"""
Content Template Resolver.

Turns a ContentSpec into rendered per-channel strings. Template text uses
``{{name}}`` placeholders; variables come from (highest first) the
request, fresh entity snapshots, and the template's defaults.
"""
import asyncio
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.application.interfaces import IEntitySnapshotSource, ITemplateRepository
from core.domain.entities import ContentTemplate, RenderedContent
from core.domain.enums import Channel
from core.domain.errors import FailedContent, NotificationError, TemplateNotFound
from core.domain.value_objects import ContentSpec, LiteralContent, TemplateContent
from gyld_sdk.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_text(text: Optional[str], variables: Mapping[str, Any]) -> Optional[str]:
    """
    Substitute ``{{name}}`` placeholders in ``text``.

    Placeholders whose variable is missing or None are left as-is.
    """
    if text is None:
        return None

    def _substitute(match: "re.Match[str]") -> str:
        value = variables.get(match.group(1))
        if value is None:
            return match.group(0)
        return _format_value(value)

    return PLACEHOLDER_PATTERN.sub(_substitute, text)


def find_placeholders(text: Optional[str]) -> List[str]:
    """Names of the placeholders still present in ``text``, in order, without duplicates."""
    if not text:
        return []
    names: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(text):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def merge_variables(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge variable layers, lowest precedence first. None values never override."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is not None:
                merged[key] = value
    return merged


class ContentTemplateResolver:
    """Renders literal or templated content for each channel."""

    def __init__(
        self,
        templates: ITemplateRepository,
        snapshots: IEntitySnapshotSource,
        lookup_timeout: float = 10.0,
    ):
        self._templates = templates
        self._snapshots = snapshots
        self._lookup_timeout = lookup_timeout

    async def render(self, content: ContentSpec, channel: Channel) -> RenderedContent:
        rendered = await self.render_all(content, [channel])
        return rendered[channel]

    async def load_templates(
        self, content: ContentSpec, channels: Iterable[Channel]
    ) -> Dict[Channel, ContentTemplate]:
        """
        Look up the template used for each channel.

        Literal content needs no templates and yields an empty mapping.

        Raises:
            TemplateNotFound: No template for the key, for some channel
            FailedContent: The template store failed or timed out
        """
        if not isinstance(content, TemplateContent):
            return {}
        return {channel: await self._find_template(content.template_key, channel) for channel in channels}

    async def render_all(
        self,
        content: ContentSpec,
        channels: Iterable[Channel],
        templates: Optional[Dict[Channel, ContentTemplate]] = None,
    ) -> Dict[Channel, RenderedContent]:
        """
        Render ``content`` for every channel in ``channels``.

        Args:
            templates: Templates already returned by ``load_templates``

        Raises:
            TemplateNotFound: No template for the key, for some channel
            FailedContent: Template or entity data could not be fetched
        """
        channels = list(channels)
        if isinstance(content, LiteralContent):
            return {channel: self._render_literal(content, channel) for channel in channels}
        if not isinstance(content, TemplateContent):
            raise TypeError(f"Unsupported content spec: {type(content).__name__}")

        templates = dict(templates or {})
        for channel in channels:
            if channel not in templates:
                templates[channel] = await self._find_template(content.template_key, channel)
        entity_variables = await self._fetch_entity_variables(content)

        rendered: Dict[Channel, RenderedContent] = {}
        for channel in channels:
            template = templates[channel]
            variables = merge_variables(template.default_variables, entity_variables, content.variables)
            rendered[channel] = RenderedContent(
                subject=render_text(template.primary_text, variables) or "",
                primary_body=render_text(template.secondary_text, variables) or "",
                secondary_body=render_text(template.tertiary_text, variables),
            )
            leftover = find_placeholders(
                " ".join(filter(None, [template.primary_text, template.secondary_text, template.tertiary_text]))
            )
            unresolved = [name for name in leftover if variables.get(name) is None]
            if unresolved:
                logger.warning(
                    "template_placeholders_unresolved",
                    template_key=content.template_key,
                    channel=channel.value,
                    placeholders=unresolved,
                )
        return rendered

    @staticmethod
    def _render_literal(content: LiteralContent, channel: Channel) -> RenderedContent:
        if channel == Channel.PUSH:
            return RenderedContent(subject=content.title, primary_body=content.body, secondary_body=content.subtitle)
        return RenderedContent(subject=content.title, primary_body=content.body, secondary_body=content.secondary_body)

    async def _find_template(self, template_key: str, channel: Channel) -> ContentTemplate:
        try:
            template = await self._lookup(self._templates.get_template(template_key, channel.value))
            if template is None:
                template = await self._lookup(self._templates.get_template(template_key, None))
        except asyncio.TimeoutError as exc:
            raise FailedContent(f"Timed out loading template '{template_key}'") from exc
        except NotificationError:
            raise
        except Exception as exc:
            raise FailedContent(f"Could not load template '{template_key}'", detail=str(exc)) from exc

        if template is None:
            raise TemplateNotFound(template_key, channel.value)
        return template

    async def _fetch_entity_variables(self, content: TemplateContent) -> Dict[str, Any]:
        variables: Dict[str, Any] = {}
        try:
            if content.gathering_id:
                gathering = await self._lookup(self._snapshots.get_gathering(content.gathering_id))
                if gathering is None:
                    raise FailedContent(f"Gathering {content.gathering_id} not found")
                variables.update({
                    "gathering_title": gathering.title,
                    "gathering_date": gathering.date,
                    "gathering_location": gathering.location,
                    "attendee_count": gathering.attendee_count,
                })
            if content.candidate_id:
                candidate = await self._lookup(self._snapshots.get_candidate(content.candidate_id))
                if candidate is None:
                    raise FailedContent(f"Candidate {content.candidate_id} not found")
                variables.update({
                    "candidate_name": candidate.name,
                    "candidate_status": candidate.status,
                })
        except asyncio.TimeoutError as exc:
            raise FailedContent("Timed out fetching template data") from exc
        except NotificationError:
            raise
        except Exception as exc:
            raise FailedContent("Could not fetch template data", detail=str(exc)) from exc
        return variables

    async def _lookup(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self._lookup_timeout)
