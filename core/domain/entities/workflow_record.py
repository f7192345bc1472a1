"""
Workflow Record entity.

Durable row tracking a scheduled or executed send.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from core.domain.enums import WorkflowStatus


@dataclass
class WorkflowRecord:
    """Persisted planned workflow."""

    kind: str
    payload: Dict[str, Any]
    status: WorkflowStatus = WorkflowStatus.PENDING
    id: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    gathering_id: Optional[str] = None
    candidate_id: Optional[str] = None
    description: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_pending(self) -> bool:
        return self.status == WorkflowStatus.PENDING
