"""Orchestration layer - notification state machine with eventing."""

from .bus import ALL_EVENTS, EventBusProtocol, InMemoryEventBus
from .events import FINISHED, RECIPIENT_FAILED, SCHEDULED, STATE_CHANGED, Event, EventMetadata
from .models import OrchestrationContext
from .orchestrator import NotificationOrchestrator

__all__ = [
    "ALL_EVENTS",
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "FINISHED",
    "InMemoryEventBus",
    "NotificationOrchestrator",
    "OrchestrationContext",
    "RECIPIENT_FAILED",
    "SCHEDULED",
    "STATE_CHANGED",
]
