"""Domain enums."""

from .channel import Channel
from .failure_reason import FailureReason
from .orchestration_mode import OrchestrationMode
from .orchestration_state import OrchestrationState
from .workflow_status import WorkflowStatus

__all__ = [
    "Channel",
    "FailureReason",
    "OrchestrationMode",
    "OrchestrationState",
    "WorkflowStatus",
]
