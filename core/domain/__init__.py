"""Domain layer - pure domain models and interfaces."""

from .entities import (
    ChannelOutcome,
    ContentTemplate,
    OrchestrationRequest,
    OrchestrationResult,
    RecipientFailure,
    RecipientResolution,
    RenderedContent,
    ResolvedRecipient,
    UserContact,
    WorkflowRecord,
)
from .enums import Channel, FailureReason, OrchestrationMode, OrchestrationState, WorkflowStatus
from .repositories import WorkflowRepository
from .value_objects import ExecutionID

__all__ = [
    "Channel",
    "ChannelOutcome",
    "ContentTemplate",
    "ExecutionID",
    "FailureReason",
    "OrchestrationMode",
    "OrchestrationRequest",
    "OrchestrationResult",
    "OrchestrationState",
    "RecipientFailure",
    "RecipientResolution",
    "RenderedContent",
    "ResolvedRecipient",
    "UserContact",
    "WorkflowRecord",
    "WorkflowRepository",
    "WorkflowStatus",
]
