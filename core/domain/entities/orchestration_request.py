"""
Orchestration Request entity.

Immutable description of one send intent.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from core.domain.enums import OrchestrationMode
from core.domain.value_objects import ContentSpec, Decoration, RecipientSpec


@dataclass(frozen=True)
class OrchestrationRequest:
    """
    One "send this message to these people" request.

    ``scheduled_for`` of ``None`` (or a time not in the future) means the
    request is executed immediately; otherwise it is persisted as a pending
    workflow for an external scheduler.
    """

    mode: OrchestrationMode
    recipients: RecipientSpec
    content: ContentSpec
    initiated_by: str
    scheduled_for: Optional[datetime] = None
    decoration: Decoration = field(default_factory=Decoration)
    gathering_id: Optional[str] = None
    candidate_id: Optional[str] = None

    def __post_init__(self):
        if self.scheduled_for is not None and self.scheduled_for.tzinfo is None:
            object.__setattr__(
                self, "scheduled_for", self.scheduled_for.replace(tzinfo=timezone.utc)
            )

    def is_due(self, now: datetime) -> bool:
        """Return True when the request should be executed at ``now``."""
        return self.scheduled_for is None or self.scheduled_for <= now

    def for_immediate_execution(self) -> "OrchestrationRequest":
        """Copy of this request with the schedule cleared."""
        return replace(self, scheduled_for=None)
