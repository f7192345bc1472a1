"""
Orchestration Mode Enum.

Selects how a single request fans out across channels.
"""
from enum import Enum


class OrchestrationMode(str, Enum):
    """Orchestration mode values."""

    PUSH_PREFERRED = "push_preferred"
    BOTH = "both"

    @property
    def workflow_kind(self) -> str:
        """Workflow type label used when a request of this mode is scheduled."""
        return f"orchestration_{self.value}"
