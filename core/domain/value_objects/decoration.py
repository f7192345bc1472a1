"""Channel-specific decoration carried alongside the content."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

MAX_ACTION_BUTTONS = 3


@dataclass(frozen=True)
class ActionButton:
    """A labelled link rendered as a push action or an email button."""

    text: str
    url: str


@dataclass(frozen=True)
class EmailDecoration:
    """Email-only metadata. ``None`` fields fall back to configured defaults."""

    template_name: Optional[str] = None
    email_type: Optional[str] = None
    sender_name: Optional[str] = None
    reply_to_address: Optional[str] = None
    unsubscribe_url: Optional[str] = None
    header_image: Optional[str] = None
    body_image: Optional[str] = None


@dataclass(frozen=True)
class Decoration:
    """Deep link, up to three buttons, and email metadata."""

    deep_link: Optional[str] = None
    buttons: Tuple[ActionButton, ...] = ()
    email: EmailDecoration = field(default_factory=EmailDecoration)

    def __post_init__(self):
        object.__setattr__(self, "buttons", tuple(self.buttons))
        if len(self.buttons) > MAX_ACTION_BUTTONS:
            raise ValueError(f"At most {MAX_ACTION_BUTTONS} action buttons are supported")

    @property
    def primary_button(self) -> Optional[ActionButton]:
        return self.buttons[0] if self.buttons else None
