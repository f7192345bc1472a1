"""Orchestration events - Event, EventMetadata and event names."""

from dataclasses import dataclass, field
from datetime import datetime

STATE_CHANGED = "notification.state_changed"
RECIPIENT_FAILED = "notification.recipient_failed"
FINISHED = "notification.finished"
SCHEDULED = "notification.scheduled"


@dataclass
class EventMetadata:
    """Metadata for an event."""

    execution_id: str
    service: str
    initiated_by: str | None
    timestamp: datetime


@dataclass
class Event:
    """Event emitted while a notification is orchestrated."""

    name: str
    metadata: EventMetadata
    payload: dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "execution_id": self.metadata.execution_id,
            "service": self.metadata.service,
            "initiated_by": self.metadata.initiated_by,
            "timestamp": self.metadata.timestamp.isoformat(),
            "payload": dict(self.payload),
        }
