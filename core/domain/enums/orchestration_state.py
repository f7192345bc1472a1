"""
Orchestration State Enum.

States of one orchestration run, in transition order.
"""
from enum import Enum


class OrchestrationState(str, Enum):
    """Orchestration state machine values."""

    VALIDATING = "validating"
    RESOLVING_RECIPIENTS = "resolving_recipients"
    RENDERING_CONTENT = "rendering_content"
    DISPATCHING = "dispatching"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (OrchestrationState.DONE, OrchestrationState.FAILED)
