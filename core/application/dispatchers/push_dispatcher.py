"""
Push Channel Dispatcher.

Sends one push message per device token, in chunks with bounded
concurrency, and matches provider tickets back to tokens by position.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from core.application.interfaces import IPushGateway, PushMessage, PushTicket
from core.domain.entities import ChannelOutcome, RenderedContent, ResolvedRecipient
from core.domain.enums import Channel, FailureReason
from core.domain.value_objects import Decoration
from core.settings.sections.push import PushSettings
from gyld_sdk.batching import chunk
from gyld_sdk.expo import is_expo_push_token
from gyld_sdk.logging import get_logger

from .base import ChannelDispatcher, DispatchContext

logger = get_logger(__name__)


@dataclass(frozen=True)
class _TokenResult:
    user_id: str
    token: str
    ticket_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None


class PushDispatcher(ChannelDispatcher):
    """Dispatches rendered content through a push gateway."""

    channel = Channel.PUSH

    def __init__(self, gateway: IPushGateway, settings: PushSettings):
        self._gateway = gateway
        self._settings = settings

    async def send(
        self,
        content: RenderedContent,
        recipients: Sequence[ResolvedRecipient],
        decoration: Decoration,
        context: DispatchContext,
    ) -> ChannelOutcome:
        outcome = ChannelOutcome(channel=Channel.PUSH, attempted=True)

        sendable: List[tuple] = []
        for recipient in recipients:
            if not recipient.has_push:
                outcome.record_excluded(recipient.user_id, FailureReason.NO_PUSH_TOKEN.value)
                continue
            for token in recipient.push_tokens:
                if is_expo_push_token(token):
                    sendable.append((recipient.user_id, token))
                else:
                    outcome.record_excluded(recipient.user_id, FailureReason.INVALID_TOKEN_FORMAT.value, token)

        if sendable:
            data = self._build_data(decoration, context)
            semaphore = asyncio.Semaphore(self._settings.max_concurrent_batches)
            batches = list(chunk(sendable, self._settings.batch_size))
            chunk_results = await asyncio.gather(
                *(self._send_chunk(batch, content, data, semaphore, context) for batch in batches)
            )
            for results in chunk_results:
                for result in results:
                    if result.ok:
                        outcome.record_success(result.user_id, result.ticket_id)
                    else:
                        outcome.record_failure(result.user_id, result.reason, result.token)

        logger.info(
            "push_dispatched",
            execution_id=context.execution_id,
            attempted=outcome.attempted_count,
            succeeded=outcome.succeeded_count,
            failed=outcome.failed_count,
        )
        return outcome

    def _build_data(self, decoration: Decoration, context: DispatchContext) -> Dict[str, Any]:
        return {
            "deep_link": decoration.deep_link,
            "buttons": [{"text": b.text, "url": b.url} for b in decoration.buttons],
            "initiated_by": context.initiated_by,
            "gathering_id": context.gathering_id,
            "candidate_id": context.candidate_id,
        }

    def _build_message(self, token: str, content: RenderedContent, data: Dict[str, Any]) -> PushMessage:
        return PushMessage(
            to=token,
            title=content.subject,
            body=content.primary_body,
            subtitle=content.secondary_body,
            data=data,
            sound="default",
            priority="high",
            image_url=self._settings.logo_url or None,
        )

    async def _send_chunk(
        self,
        batch: List[tuple],
        content: RenderedContent,
        data: Dict[str, Any],
        semaphore: asyncio.Semaphore,
        context: DispatchContext,
    ) -> List[_TokenResult]:
        messages = [self._build_message(token, content, data) for _, token in batch]
        async with semaphore:
            try:
                tickets = await asyncio.wait_for(
                    self._gateway.send_batch(messages), timeout=self._settings.request_timeout
                )
            except asyncio.TimeoutError:
                logger.warning("push_chunk_timeout", execution_id=context.execution_id, size=len(batch))
                return [_TokenResult(uid, token, reason=FailureReason.TIMEOUT.value) for uid, token in batch]
            except Exception as exc:
                logger.error(
                    "push_chunk_failed",
                    execution_id=context.execution_id,
                    size=len(batch),
                    error=str(exc),
                )
                return [
                    _TokenResult(uid, token, reason=FailureReason.CHANNEL_SEND_ERROR.value) for uid, token in batch
                ]

        results = []
        for index, (user_id, token) in enumerate(batch):
            ticket: Optional[PushTicket] = tickets[index] if index < len(tickets) else None
            if ticket is None:
                results.append(_TokenResult(user_id, token, reason=FailureReason.UNKNOWN_ERROR.value))
            elif ticket.ok:
                results.append(_TokenResult(user_id, token, ticket_id=ticket.id))
            else:
                reason = ticket.error_code or FailureReason.UNKNOWN_ERROR.value
                results.append(_TokenResult(user_id, token, reason=reason))
        return results
