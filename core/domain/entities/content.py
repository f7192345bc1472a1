"""Content templates and rendered content."""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from core.domain.value_objects import TemplateValue


@dataclass(frozen=True)
class ContentTemplate:
    """
    Stored content template.

    ``channel`` of ``None`` marks a channel-agnostic template used when no
    channel-specific variant exists for the same key.
    """

    content_key: str
    primary_text: Optional[str] = None
    secondary_text: Optional[str] = None
    tertiary_text: Optional[str] = None
    channel: Optional[str] = None
    default_variables: Mapping[str, TemplateValue] = field(default_factory=dict)


@dataclass(frozen=True)
class RenderedContent:
    """
    Per-channel rendered strings.

    Push uses subject as title, primary_body as body and secondary_body as
    subtitle. Email uses them as subject, body1 and body2.
    """

    subject: str
    primary_body: str
    secondary_body: Optional[str] = None
