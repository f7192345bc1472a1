"""
Workflow Service.

Executes scheduled notifications stored as planned workflow records.
Invoked by an external scheduler (cron, queue worker, or the HTTP API).
"""
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, List, Optional

from core.application.dtos import new_workflow_record, parse_notification_request, result_snapshot
from core.domain.entities import OrchestrationRequest, OrchestrationResult, WorkflowRecord
from core.domain.enums import WorkflowStatus
from core.domain.errors import InvalidRequest, NotificationError, WorkflowNotFound, WorkflowPersistenceError
from core.domain.repositories import WorkflowRepository
from gyld_sdk.logging import get_logger
from gyld_sdk.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from orchestration.orchestrator import NotificationOrchestrator

logger = get_logger(__name__)


class WorkflowService:
    """Schedules, executes, cancels and retries planned workflows."""

    def __init__(
        self,
        repository: WorkflowRepository,
        orchestrator: "NotificationOrchestrator",
        due_batch_limit: int = 100,
        executing_timeout: float = 900.0,
    ):
        self._repository = repository
        self._orchestrator = orchestrator
        self._due_batch_limit = due_batch_limit
        self._executing_timeout = timedelta(seconds=executing_timeout)

    async def schedule(self, request: OrchestrationRequest) -> str:
        """
        Create a pending record for ``request``.

        Returns:
            The new workflow ID

        Raises:
            WorkflowPersistenceError: The record could not be written
        """
        result = await self._orchestrator.schedule(request)
        return result.workflow_id

    async def get(self, workflow_id: str) -> WorkflowRecord:
        record = await self._repository.get_by_id(workflow_id)
        if record is None:
            raise WorkflowNotFound(workflow_id)
        return record

    async def list_workflows(
        self,
        status: Optional[WorkflowStatus] = None,
        gathering_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[WorkflowRecord]:
        if gathering_id or candidate_id:
            records = await self._repository.list_by_associated_entity(
                gathering_id=gathering_id, candidate_id=candidate_id, limit=limit
            )
            if status is not None:
                records = [r for r in records if r.status == status]
            return records
        return await self._repository.list_by_status(status or WorkflowStatus.PENDING, limit=limit)

    async def execute(self, workflow_id: str) -> Optional[OrchestrationResult]:
        """
        Execute one pending workflow.

        Returns:
            The orchestration result, or None when another caller already
            claimed the record (or it is no longer pending)

        Raises:
            WorkflowNotFound: No record with this ID
            WorkflowPersistenceError: The final status could not be stored;
                the record stays ``executing`` until retry picks it up
        """
        record = await self.get(workflow_id)
        claimed = await self._repository.transition_status(
            workflow_id, WorkflowStatus.PENDING, WorkflowStatus.EXECUTING
        )
        if not claimed:
            logger.info("workflow_not_claimed", workflow_id=workflow_id)
            return None

        logger.info("workflow_executing", workflow_id=workflow_id, kind=record.kind)
        try:
            request = parse_notification_request(record.payload)
            result = await self._orchestrator.execute(request.for_immediate_execution())
        except NotificationError as exc:
            result = OrchestrationResult.failed(error=exc.code, message=exc.message, detail=exc.detail)
        except Exception as exc:
            logger.error("workflow_execution_crashed", workflow_id=workflow_id, error=str(exc), exc_info=True)
            result = OrchestrationResult.failed(error="InternalError", message=str(exc))

        result.workflow_id = workflow_id
        status = WorkflowStatus.COMPLETED if result.success else WorkflowStatus.FAILED
        await self._store_final_status(
            workflow_id,
            status=status,
            result=result_snapshot(result),
            error=None if result.success else (result.error or result.message),
        )
        logger.info("workflow_finished", workflow_id=workflow_id, status=status.value)
        return result

    async def _store_final_status(self, workflow_id: str, **fields) -> None:
        try:
            await self._repository.update(workflow_id, **fields)
            return
        except WorkflowPersistenceError as exc:
            logger.warning("workflow_final_write_failed", workflow_id=workflow_id, error=str(exc))
        try:
            await self._repository.update(workflow_id, **fields)
        except WorkflowPersistenceError as exc:
            logger.error(
                "workflow_final_write_abandoned",
                workflow_id=workflow_id,
                status=fields["status"].value,
                error=str(exc),
            )
            raise

    async def run_due(self, now: Optional[datetime] = None) -> List[str]:
        """Execute every pending record scheduled at or before ``now``; returns the executed IDs."""
        now = now or utc_now()
        due = await self._repository.list_due(now, limit=self._due_batch_limit)
        executed = []
        for record in due:
            if await self.execute(record.id) is not None:
                executed.append(record.id)
        logger.info("workflows_due_processed", due=len(due), executed=len(executed))
        return executed

    async def cancel(self, workflow_id: str) -> bool:
        """Cancel a pending record. Returns False if it already left ``pending``."""
        await self.get(workflow_id)
        cancelled = await self._repository.transition_status(
            workflow_id, WorkflowStatus.PENDING, WorkflowStatus.CANCELLED
        )
        if cancelled:
            logger.info("workflow_cancelled", workflow_id=workflow_id)
        return cancelled

    async def reschedule(self, workflow_id: str, scheduled_for: datetime) -> bool:
        """Move a pending record to a new time. Returns False if it already left ``pending``."""
        await self.get(workflow_id)
        scheduled_for = ensure_utc(scheduled_for)
        moved = await self._repository.reschedule_pending(workflow_id, scheduled_for)
        if moved:
            logger.info("workflow_rescheduled", workflow_id=workflow_id, scheduled_for=scheduled_for.isoformat())
        return moved

    async def retry(self, workflow_id: str, scheduled_for: Optional[datetime] = None) -> str:
        """
        Re-run a finished record from its payload snapshot.

        A new pending record is created; the original stays for audit. A
        record left in ``executing`` longer than the executing timeout is
        treated as abandoned: it is marked failed and retried.
        """
        record = await self.get(workflow_id)
        if record.status == WorkflowStatus.EXECUTING and self._is_abandoned(record):
            await self._fail_abandoned(record)
        elif record.status in (WorkflowStatus.PENDING, WorkflowStatus.EXECUTING):
            raise InvalidRequest(f"Workflow {workflow_id} is still {record.status.value}")
        try:
            request = parse_notification_request(record.payload)
        except InvalidRequest as exc:
            raise InvalidRequest(f"Workflow {workflow_id} has an unreadable payload", detail=exc.detail) from exc

        retry_record = new_workflow_record(request)
        retry_record.scheduled_for = scheduled_for or utc_now()
        retry_record.description = f"Retry of {workflow_id}"
        try:
            new_id = await self._repository.create(retry_record)
        except WorkflowPersistenceError:
            raise
        except Exception as exc:
            raise WorkflowPersistenceError("Could not create retry record", detail=str(exc)) from exc
        logger.info("workflow_retry_scheduled", workflow_id=workflow_id, retry_id=new_id)
        return new_id

    def _is_abandoned(self, record: WorkflowRecord) -> bool:
        if record.updated_at is None:
            return False
        return utc_now() - ensure_utc(record.updated_at) >= self._executing_timeout

    async def _fail_abandoned(self, record: WorkflowRecord) -> None:
        claimed = await self._repository.transition_status(
            record.id, WorkflowStatus.EXECUTING, WorkflowStatus.FAILED
        )
        if not claimed:
            raise InvalidRequest(f"Workflow {record.id} changed state during retry")
        await self._repository.update(record.id, error="Abandoned while executing")
        logger.warning("workflow_abandoned", workflow_id=record.id, updated_at=record.updated_at.isoformat())

    async def delete(self, workflow_id: str) -> None:
        """Delete a record (explicit administrative action)."""
        await self.get(workflow_id)
        await self._repository.delete(workflow_id)
        logger.info("workflow_deleted", workflow_id=workflow_id)
