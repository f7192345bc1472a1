"""Domain value objects."""

from .execution_id import ExecutionID
from .content_spec import ContentSpec, LiteralContent, TemplateContent, TemplateValue
from .decoration import MAX_ACTION_BUTTONS, ActionButton, Decoration, EmailDecoration
from .recipient_spec import (
    RSVP_STATUSES,
    ExplicitRecipients,
    MembershipRecipients,
    RecipientSpec,
    RsvpRecipients,
)

__all__ = [
    "ExecutionID",
    "ContentSpec",
    "LiteralContent",
    "TemplateContent",
    "TemplateValue",
    "MAX_ACTION_BUTTONS",
    "ActionButton",
    "Decoration",
    "EmailDecoration",
    "RSVP_STATUSES",
    "ExplicitRecipients",
    "MembershipRecipients",
    "RecipientSpec",
    "RsvpRecipients",
]
