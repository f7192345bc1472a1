"""DTOs for planned workflow records."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.domain.entities import OrchestrationRequest, WorkflowRecord
from core.domain.enums import WorkflowStatus

from .notification_dto import request_snapshot


class WorkflowDTO(BaseModel):
    """Response DTO for a workflow record."""

    id: str = Field(..., description="Workflow ID")
    status: WorkflowStatus = Field(..., description="Lifecycle status")
    kind: str = Field(..., description="Workflow type label")
    scheduled_for: Optional[datetime] = Field(None, description="Planned send time")
    gathering_id: Optional[str] = None
    candidate_id: Optional[str] = None
    description: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict, description="Request snapshot")
    result: Optional[Dict[str, Any]] = Field(None, description="Last result snapshot")
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}

    @classmethod
    def from_domain(cls, record: WorkflowRecord) -> "WorkflowDTO":
        return cls(
            id=record.id,
            status=record.status,
            kind=record.kind,
            scheduled_for=record.scheduled_for,
            gathering_id=record.gathering_id,
            candidate_id=record.candidate_id,
            description=record.description,
            payload=record.payload,
            result=record.result,
            error=record.error,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class WorkflowListDTO(BaseModel):
    """DTO for listing workflow records."""

    workflows: List[WorkflowDTO] = Field(default_factory=list)
    total: int = Field(..., ge=0)

    model_config = {"frozen": True}


class RunDueResponseDTO(BaseModel):
    """Response DTO for a scheduler tick."""

    executed: List[str] = Field(default_factory=list, description="IDs executed by this run")
    total: int = Field(..., ge=0)

    model_config = {"frozen": True}


class RetryWorkflowDTO(BaseModel):
    """Request DTO for re-running a finished workflow."""

    scheduled_for: Optional[datetime] = Field(None, description="When to re-run; defaults to now")

    model_config = {"frozen": True, "extra": "forbid"}


class RescheduleWorkflowDTO(BaseModel):
    """Request DTO for moving a pending workflow."""

    scheduled_for: datetime = Field(..., description="New send time; naive values are UTC")

    model_config = {"frozen": True, "extra": "forbid"}


class WorkflowActionDTO(BaseModel):
    """Response DTO for cancel, reschedule and retry."""

    workflow_id: str
    success: bool
    message: str

    model_config = {"frozen": True}


def describe_request(request: OrchestrationRequest) -> str:
    spec = request.recipients
    return f"{request.mode.value} notification to {spec.kind} by {request.initiated_by}"


def new_workflow_record(request: OrchestrationRequest) -> WorkflowRecord:
    """Build the pending record for a scheduled request."""
    return WorkflowRecord(
        kind=request.mode.workflow_kind,
        payload=request_snapshot(request),
        status=WorkflowStatus.PENDING,
        scheduled_for=request.scheduled_for,
        gathering_id=request.gathering_id,
        candidate_id=request.candidate_id,
        description=describe_request(request),
    )
