"""
Planned workflow endpoints.

Inspect, execute, cancel, reschedule and retry scheduled notifications. ``run-due`` is
the hook an external scheduler calls on every tick.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from api.dependencies import get_workflow_service, verify_api_token
from core.application.dtos import (
    NotificationResultDTO,
    RescheduleWorkflowDTO,
    RetryWorkflowDTO,
    RunDueResponseDTO,
    WorkflowActionDTO,
    WorkflowDTO,
    WorkflowListDTO,
)
from core.application.services import WorkflowService
from core.domain.enums import WorkflowStatus
from gyld_sdk.utils.datetime import ensure_utc


router = APIRouter(prefix="/workflows", dependencies=[Depends(verify_api_token)])


@router.post(
    "/run-due",
    response_model=RunDueResponseDTO,
    summary="Execute every due workflow",
)
async def run_due(service: WorkflowService = Depends(get_workflow_service)) -> RunDueResponseDTO:
    executed = await service.run_due()
    return RunDueResponseDTO(executed=executed, total=len(executed))


@router.get(
    "",
    response_model=WorkflowListDTO,
    summary="List workflows",
    description="Filter by status, or by associated gathering or candidate.",
)
async def list_workflows(
    status_filter: Optional[WorkflowStatus] = Query(None, alias="status"),
    gathering_id: Optional[str] = Query(None),
    candidate_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    service: WorkflowService = Depends(get_workflow_service),
) -> WorkflowListDTO:
    records = await service.list_workflows(
        status=status_filter,
        gathering_id=gathering_id,
        candidate_id=candidate_id,
        limit=limit,
    )
    return WorkflowListDTO(
        workflows=[WorkflowDTO.from_domain(r) for r in records],
        total=len(records),
    )


@router.get("/{workflow_id}", response_model=WorkflowDTO, summary="Get workflow")
async def get_workflow(
    workflow_id: str,
    service: WorkflowService = Depends(get_workflow_service),
) -> WorkflowDTO:
    record = await service.get(workflow_id)
    return WorkflowDTO.from_domain(record)


@router.post(
    "/{workflow_id}/execute",
    response_model=NotificationResultDTO,
    summary="Execute a pending workflow now",
)
async def execute_workflow(
    workflow_id: str,
    service: WorkflowService = Depends(get_workflow_service),
) -> NotificationResultDTO:
    result = await service.execute(workflow_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Workflow {workflow_id} is not pending",
        )
    return NotificationResultDTO.from_domain(result)


@router.post(
    "/{workflow_id}/cancel",
    response_model=WorkflowActionDTO,
    summary="Cancel a pending workflow",
)
async def cancel_workflow(
    workflow_id: str,
    service: WorkflowService = Depends(get_workflow_service),
) -> WorkflowActionDTO:
    cancelled = await service.cancel(workflow_id)
    if not cancelled:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Workflow {workflow_id} is not pending",
        )
    return WorkflowActionDTO(workflow_id=workflow_id, success=True, message="Workflow cancelled")


@router.post(
    "/{workflow_id}/reschedule",
    response_model=WorkflowActionDTO,
    summary="Move a pending workflow to a new time",
)
async def reschedule_workflow(
    workflow_id: str,
    body: RescheduleWorkflowDTO,
    service: WorkflowService = Depends(get_workflow_service),
) -> WorkflowActionDTO:
    scheduled_for = ensure_utc(body.scheduled_for)
    moved = await service.reschedule(workflow_id, scheduled_for)
    if not moved:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Workflow {workflow_id} is not pending",
        )
    return WorkflowActionDTO(
        workflow_id=workflow_id,
        success=True,
        message=f"Workflow rescheduled for {scheduled_for.isoformat()}",
    )


@router.post(
    "/{workflow_id}/retry",
    response_model=WorkflowActionDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Re-run a finished workflow",
    description="Creates a new pending workflow from the original payload. The original is kept.",
)
async def retry_workflow(
    workflow_id: str,
    body: Optional[RetryWorkflowDTO] = Body(None),
    service: WorkflowService = Depends(get_workflow_service),
) -> WorkflowActionDTO:
    scheduled_for = ensure_utc(body.scheduled_for) if body and body.scheduled_for else None
    new_id = await service.retry(workflow_id, scheduled_for=scheduled_for)
    return WorkflowActionDTO(workflow_id=new_id, success=True, message=f"Retry of {workflow_id} scheduled")


@router.delete(
    "/{workflow_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a workflow",
)
async def delete_workflow(
    workflow_id: str,
    service: WorkflowService = Depends(get_workflow_service),
) -> None:
    await service.delete(workflow_id)
