"""
SQLAlchemy Workflow Repository Implementation.

Implements WorkflowRepository over the planned_workflows table. Every
operation runs in its own short transaction so that concurrent executors
see each other's status transitions.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.domain.entities import WorkflowRecord
from core.domain.enums import WorkflowStatus
from core.domain.errors import WorkflowPersistenceError
from core.domain.repositories import WorkflowRepository, check_updatable_fields
from core.infrastructure.database.models import PlannedWorkflowModel, WorkflowTypeModel
from gyld_sdk.logging import get_logger
from gyld_sdk.utils.datetime import ensure_utc, utc_now

logger = get_logger(__name__)


async def get_or_create_workflow_type(session: AsyncSession, label: str) -> int:
    """
    Insert ``label`` into workflow_types unless present, and return its ID.

    Uses a single INSERT ... ON CONFLICT DO NOTHING where the dialect
    supports it, so concurrent callers never race on a read-then-write.
    """
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(WorkflowTypeModel).values(label=label).on_conflict_do_nothing(
            index_elements=["label"]
        )
        await session.execute(stmt)
    elif dialect == "sqlite":
        stmt = sqlite.insert(WorkflowTypeModel).values(label=label).on_conflict_do_nothing(
            index_elements=["label"]
        )
        await session.execute(stmt)
    else:
        try:
            async with session.begin_nested():
                session.add(WorkflowTypeModel(label=label))
        except IntegrityError:
            pass

    result = await session.execute(select(WorkflowTypeModel.id).where(WorkflowTypeModel.label == label))
    return result.scalar_one()


class SQLAlchemyWorkflowRepository(WorkflowRepository):
    """SQLAlchemy implementation of WorkflowRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize repository.

        Args:
            session_factory: Factory creating one session per operation
        """
        self.session_factory = session_factory

    async def create(self, record: WorkflowRecord) -> str:
        workflow_id = record.id or str(uuid.uuid4())
        now = utc_now()
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    type_id = await get_or_create_workflow_type(session, record.kind)
                    session.add(
                        PlannedWorkflowModel(
                            id=workflow_id,
                            workflow_type_id=type_id,
                            kind=record.kind,
                            status=WorkflowStatus(record.status).value,
                            scheduled_for=ensure_utc(record.scheduled_for),
                            gathering_id=record.gathering_id,
                            candidate_id=record.candidate_id,
                            description=record.description,
                            payload=record.payload,
                            result=record.result,
                            error=record.error,
                            created_at=now,
                            updated_at=now,
                        )
                    )
        except SQLAlchemyError as exc:
            logger.error("workflow_create_failed", workflow_id=workflow_id, error=str(exc))
            raise WorkflowPersistenceError("Could not create workflow record", detail=str(exc)) from exc

        record.id = workflow_id
        record.created_at = now
        record.updated_at = now
        logger.info("workflow_created", workflow_id=workflow_id, kind=record.kind, status=record.status.value)
        return workflow_id

    async def update(self, workflow_id: str, **fields: Any) -> Optional[WorkflowRecord]:
        check_updatable_fields(fields)

        values: Dict[str, Any] = dict(fields)
        if "status" in values:
            values["status"] = WorkflowStatus(values["status"]).value
        if "scheduled_for" in values:
            values["scheduled_for"] = ensure_utc(values["scheduled_for"])
        values["updated_at"] = utc_now()

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(
                        update(PlannedWorkflowModel).where(PlannedWorkflowModel.id == workflow_id).values(**values)
                    )
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError(f"Could not update workflow {workflow_id}", detail=str(exc)) from exc
        return await self.get_by_id(workflow_id)

    async def get_by_id(self, workflow_id: str) -> Optional[WorkflowRecord]:
        model = await self._fetch_one(select(PlannedWorkflowModel).where(PlannedWorkflowModel.id == workflow_id))
        return self._to_domain_entity(model) if model else None

    async def list_by_status(self, status: WorkflowStatus, limit: int = 100) -> List[WorkflowRecord]:
        return await self._fetch_all(
            select(PlannedWorkflowModel)
            .where(PlannedWorkflowModel.status == WorkflowStatus(status).value)
            .order_by(PlannedWorkflowModel.created_at)
            .limit(limit)
        )

    async def list_by_associated_entity(
        self,
        gathering_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[WorkflowRecord]:
        conditions = []
        if gathering_id:
            conditions.append(PlannedWorkflowModel.gathering_id == gathering_id)
        if candidate_id:
            conditions.append(PlannedWorkflowModel.candidate_id == candidate_id)
        if not conditions:
            return []
        return await self._fetch_all(
            select(PlannedWorkflowModel)
            .where(or_(*conditions))
            .order_by(PlannedWorkflowModel.created_at)
            .limit(limit)
        )

    async def list_due(self, now: datetime, limit: int = 100) -> List[WorkflowRecord]:
        return await self._fetch_all(
            select(PlannedWorkflowModel)
            .where(
                and_(
                    PlannedWorkflowModel.status == WorkflowStatus.PENDING.value,
                    PlannedWorkflowModel.scheduled_for <= ensure_utc(now),
                )
            )
            .order_by(PlannedWorkflowModel.scheduled_for)
            .limit(limit)
        )

    async def transition_status(self, workflow_id: str, expected: WorkflowStatus, new: WorkflowStatus) -> bool:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(PlannedWorkflowModel)
                        .where(
                            and_(
                                PlannedWorkflowModel.id == workflow_id,
                                PlannedWorkflowModel.status == WorkflowStatus(expected).value,
                            )
                        )
                        .values(status=WorkflowStatus(new).value, updated_at=utc_now())
                    )
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError(
                f"Could not transition workflow {workflow_id}", detail=str(exc)
            ) from exc

        transitioned = result.rowcount == 1
        logger.info(
            "workflow_status_transition",
            workflow_id=workflow_id,
            expected=WorkflowStatus(expected).value,
            new=WorkflowStatus(new).value,
            transitioned=transitioned,
        )
        return transitioned

    async def reschedule_pending(self, workflow_id: str, scheduled_for: datetime) -> bool:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(PlannedWorkflowModel)
                        .where(
                            and_(
                                PlannedWorkflowModel.id == workflow_id,
                                PlannedWorkflowModel.status == WorkflowStatus.PENDING.value,
                            )
                        )
                        .values(scheduled_for=ensure_utc(scheduled_for), updated_at=utc_now())
                    )
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError(
                f"Could not reschedule workflow {workflow_id}", detail=str(exc)
            ) from exc
        return result.rowcount == 1

    async def delete(self, workflow_id: str) -> bool:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        delete(PlannedWorkflowModel).where(PlannedWorkflowModel.id == workflow_id)
                    )
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError(f"Could not delete workflow {workflow_id}", detail=str(exc)) from exc
        return result.rowcount > 0

    async def get_or_create_workflow_type(self, label: str) -> int:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    return await get_or_create_workflow_type(session, label)
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError(f"Could not resolve workflow type {label}", detail=str(exc)) from exc

    async def _fetch_one(self, stmt) -> Optional[PlannedWorkflowModel]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError("Could not read workflow records", detail=str(exc)) from exc

    async def _fetch_all(self, stmt) -> List[WorkflowRecord]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return [self._to_domain_entity(m) for m in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError("Could not read workflow records", detail=str(exc)) from exc

    @staticmethod
    def _to_domain_entity(model: PlannedWorkflowModel) -> WorkflowRecord:
        return WorkflowRecord(
            id=model.id,
            kind=model.kind,
            status=WorkflowStatus(model.status),
            payload=model.payload or {},
            scheduled_for=ensure_utc(model.scheduled_for),
            gathering_id=model.gathering_id,
            candidate_id=model.candidate_id,
            description=model.description,
            result=model.result,
            error=model.error,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )
