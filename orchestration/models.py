"""Orchestration models - OrchestrationContext."""

from dataclasses import dataclass, field
from datetime import datetime

from core.domain.entities import OrchestrationRequest
from core.domain.enums import OrchestrationState
from core.domain.value_objects import ExecutionID


@dataclass
class OrchestrationContext:
    """Mutable state of one orchestration run."""

    execution_id: ExecutionID
    request: OrchestrationRequest
    started_at: datetime
    state: OrchestrationState = OrchestrationState.VALIDATING
    history: list[tuple[OrchestrationState, datetime]] = field(default_factory=list)

    @property
    def execution_key(self) -> str:
        return str(self.execution_id)
