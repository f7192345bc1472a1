"""
SQLAlchemy Delivery Log.

Writes one notifications_sent row for the recipients a channel reached
and one for those it failed.
"""
from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import IDeliveryLog
from core.domain.entities import ChannelOutcome, RenderedContent
from core.domain.enums import Channel
from core.domain.errors import WorkflowPersistenceError
from core.infrastructure.database.models import NotificationSentModel
from gyld_sdk.logging import get_logger

from .sqlalchemy_workflow_repository import get_or_create_workflow_type

logger = get_logger(__name__)


class SQLAlchemyDeliveryLog(IDeliveryLog):
    """Delivery audit backed by the notifications_sent table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(
        self,
        execution_id: str,
        channel: Channel,
        content: RenderedContent,
        outcome: ChannelOutcome,
    ) -> None:
        failed_ids = [uid for uid in outcome.failed_user_ids if uid not in outcome.recipient_ids_succeeded]
        reasons: Dict[str, List[str]] = {}
        for failure in outcome.failures:
            if failure.user_id in failed_ids and failure.reason not in reasons.get(failure.user_id, []):
                reasons.setdefault(failure.user_id, []).append(failure.reason)

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    type_id = await get_or_create_workflow_type(session, channel.value)
                    if outcome.recipient_ids_succeeded:
                        session.add(
                            NotificationSentModel(
                                workflow_type_id=type_id,
                                execution_id=execution_id,
                                channel=channel.value,
                                status="sent",
                                to_address=list(outcome.recipient_ids_succeeded),
                                subject=content.subject,
                                body1=content.primary_body,
                            )
                        )
                    if failed_ids:
                        session.add(
                            NotificationSentModel(
                                workflow_type_id=type_id,
                                execution_id=execution_id,
                                channel=channel.value,
                                status="failed",
                                to_address=failed_ids,
                                failure_reasons=reasons,
                                subject=content.subject,
                                body1=content.primary_body,
                            )
                        )
        except SQLAlchemyError as exc:
            raise WorkflowPersistenceError("Could not record delivery", detail=str(exc)) from exc

        logger.info(
            "delivery_recorded",
            execution_id=execution_id,
            channel=channel.value,
            sent=len(outcome.recipient_ids_succeeded),
            failed=len(failed_ids),
        )
