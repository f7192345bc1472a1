"""Repository interface for planned workflow records."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional

from ..entities.workflow_record import WorkflowRecord
from ..enums import WorkflowStatus

UPDATABLE_FIELDS = frozenset({
    "status",
    "scheduled_for",
    "gathering_id",
    "candidate_id",
    "description",
    "payload",
    "result",
    "error",
})


def check_updatable_fields(fields) -> None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update workflow fields: {', '.join(sorted(unknown))}")


class WorkflowRepository(ABC):
    """Abstract store for scheduled and executed sends."""

    @abstractmethod
    async def create(self, record: WorkflowRecord) -> str:
        """Persist a new record.

        The record's ``kind`` is registered as a workflow type in the
        same write.

        Args:
            record: Record to insert. ``id`` is assigned when missing.

        Returns:
            The record ID

        Raises:
            WorkflowPersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, workflow_id: str, **fields: Any) -> Optional[WorkflowRecord]:
        """Overwrite the given fields; returns the updated record or None.

        Raises:
            ValueError: A field outside ``UPDATABLE_FIELDS`` was given
            WorkflowPersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def get_by_id(self, workflow_id: str) -> Optional[WorkflowRecord]:
        pass

    @abstractmethod
    async def list_by_status(self, status: WorkflowStatus, limit: int = 100) -> List[WorkflowRecord]:
        pass

    @abstractmethod
    async def list_by_associated_entity(
        self,
        gathering_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[WorkflowRecord]:
        """Records linked to a gathering and/or candidate."""
        pass

    @abstractmethod
    async def list_due(self, now: datetime, limit: int = 100) -> List[WorkflowRecord]:
        """Pending records whose ``scheduled_for`` is not after ``now``, oldest first."""
        pass

    @abstractmethod
    async def transition_status(
        self,
        workflow_id: str,
        expected: WorkflowStatus,
        new: WorkflowStatus,
    ) -> bool:
        """Atomically move a record from ``expected`` to ``new``.

        Returns:
            True if this caller performed the transition, False if the
            record was missing or no longer in ``expected``
        """
        pass

    @abstractmethod
    async def reschedule_pending(self, workflow_id: str, scheduled_for: datetime) -> bool:
        """Atomically move a pending record to ``scheduled_for``.

        Returns:
            True if the record was pending and now carries the new time
        """
        pass

    @abstractmethod
    async def delete(self, workflow_id: str) -> bool:
        pass

    @abstractmethod
    async def get_or_create_workflow_type(self, label: str) -> int:
        """Return the ID of the workflow type ``label``, inserting it if absent."""
        pass
