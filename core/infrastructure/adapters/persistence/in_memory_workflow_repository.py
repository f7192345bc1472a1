"""
In-memory Workflow Repository Implementation.

Stores workflow records in a dictionary. Status transitions are
serialized with an asyncio lock.
"""
import asyncio
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.application.interfaces import IDeliveryLog
from core.domain.entities import ChannelOutcome, RenderedContent, WorkflowRecord
from core.domain.enums import Channel, WorkflowStatus
from core.domain.repositories import WorkflowRepository, check_updatable_fields
from gyld_sdk.logging import get_logger
from gyld_sdk.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)


class InMemoryWorkflowRepository(WorkflowRepository):
    """In-memory implementation of WorkflowRepository."""

    def __init__(self):
        self._storage: Dict[str, WorkflowRecord] = {}
        self._types: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def create(self, record: WorkflowRecord) -> str:
        workflow_id = record.id or str(uuid.uuid4())
        now = utc_now()
        stored = replace(
            record,
            id=workflow_id,
            scheduled_for=ensure_utc(record.scheduled_for),
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            self._types.setdefault(record.kind, len(self._types) + 1)
            self._storage[workflow_id] = stored
        record.id = workflow_id
        logger.info("workflow_created", workflow_id=workflow_id, kind=record.kind)
        return workflow_id

    async def update(self, workflow_id: str, **fields: Any) -> Optional[WorkflowRecord]:
        check_updatable_fields(fields)
        async with self._lock:
            record = self._storage.get(workflow_id)
            if record is None:
                return None
            if "status" in fields:
                fields["status"] = WorkflowStatus(fields["status"])
            if "scheduled_for" in fields:
                fields["scheduled_for"] = ensure_utc(fields["scheduled_for"])
            updated = replace(record, updated_at=utc_now(), **fields)
            self._storage[workflow_id] = updated
        return replace(updated)

    async def get_by_id(self, workflow_id: str) -> Optional[WorkflowRecord]:
        record = self._storage.get(workflow_id)
        return replace(record) if record else None

    async def list_by_status(self, status: WorkflowStatus, limit: int = 100) -> List[WorkflowRecord]:
        records = [r for r in self._storage.values() if r.status == status]
        return [replace(r) for r in records[:limit]]

    async def list_by_associated_entity(
        self,
        gathering_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[WorkflowRecord]:
        if not gathering_id and not candidate_id:
            return []
        records = [
            r for r in self._storage.values()
            if (gathering_id and r.gathering_id == gathering_id)
            or (candidate_id and r.candidate_id == candidate_id)
        ]
        return [replace(r) for r in records[:limit]]

    async def list_due(self, now: datetime, limit: int = 100) -> List[WorkflowRecord]:
        now = ensure_utc(now)
        due = [
            r for r in self._storage.values()
            if r.status == WorkflowStatus.PENDING and r.scheduled_for is not None and r.scheduled_for <= now
        ]
        due.sort(key=lambda r: r.scheduled_for)
        return [replace(r) for r in due[:limit]]

    async def transition_status(self, workflow_id: str, expected: WorkflowStatus, new: WorkflowStatus) -> bool:
        async with self._lock:
            record = self._storage.get(workflow_id)
            if record is None or record.status != expected:
                return False
            self._storage[workflow_id] = replace(record, status=WorkflowStatus(new), updated_at=utc_now())
            return True

    async def reschedule_pending(self, workflow_id: str, scheduled_for: datetime) -> bool:
        async with self._lock:
            record = self._storage.get(workflow_id)
            if record is None or record.status != WorkflowStatus.PENDING:
                return False
            self._storage[workflow_id] = replace(
                record, scheduled_for=ensure_utc(scheduled_for), updated_at=utc_now()
            )
            return True

    async def delete(self, workflow_id: str) -> bool:
        async with self._lock:
            return self._storage.pop(workflow_id, None) is not None

    async def get_or_create_workflow_type(self, label: str) -> int:
        async with self._lock:
            return self._types.setdefault(label, len(self._types) + 1)


class InMemoryDeliveryLog(IDeliveryLog):
    """Keeps delivery rows in a list."""

    def __init__(self):
        self.entries: List[Dict[str, Any]] = []

    async def record(
        self,
        execution_id: str,
        channel: Channel,
        content: RenderedContent,
        outcome: ChannelOutcome,
    ) -> None:
        failed = [uid for uid in outcome.failed_user_ids if uid not in outcome.recipient_ids_succeeded]
        if outcome.recipient_ids_succeeded:
            self.entries.append({
                "execution_id": execution_id,
                "channel": channel.value,
                "status": "sent",
                "to_address": list(outcome.recipient_ids_succeeded),
                "subject": content.subject,
            })
        if failed:
            self.entries.append({
                "execution_id": execution_id,
                "channel": channel.value,
                "status": "failed",
                "to_address": failed,
                "subject": content.subject,
            })
