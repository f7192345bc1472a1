"""
Email Channel Dispatcher.

Sends one templated email per chunk of recipients, one personalization
per recipient.
"""
import asyncio
from typing import List, Sequence

from core.application.interfaces import EmailPersonalization, EmailSendReceipt, IEmailGateway, TemplatedEmail
from core.domain.entities import ChannelOutcome, RenderedContent, ResolvedRecipient
from core.domain.enums import Channel, FailureReason
from core.domain.value_objects import Decoration
from core.settings.sections.email import EmailSettings
from gyld_sdk.batching import chunk
from gyld_sdk.logging import get_logger

from .base import ChannelDispatcher, DispatchContext

logger = get_logger(__name__)


class EmailDispatcher(ChannelDispatcher):
    """Dispatches rendered content through an email gateway."""

    channel = Channel.EMAIL

    def __init__(self, gateway: IEmailGateway, settings: EmailSettings):
        self._gateway = gateway
        self._settings = settings

    async def send(
        self,
        content: RenderedContent,
        recipients: Sequence[ResolvedRecipient],
        decoration: Decoration,
        context: DispatchContext,
    ) -> ChannelOutcome:
        outcome = ChannelOutcome(channel=Channel.EMAIL, attempted=True)

        sendable: List[ResolvedRecipient] = []
        for recipient in recipients:
            if recipient.has_email:
                sendable.append(recipient)
            else:
                outcome.record_excluded(recipient.user_id, FailureReason.NO_EMAIL_ADDRESS.value)

        for batch in chunk(sendable, self._settings.batch_size):
            email = self._build_email(content, batch, decoration)
            try:
                receipt = await asyncio.wait_for(self._gateway.send(email), timeout=self._settings.request_timeout)
            except asyncio.TimeoutError:
                logger.warning("email_chunk_timeout", execution_id=context.execution_id, size=len(batch))
                self._fail_all(outcome, batch, FailureReason.TIMEOUT.value)
                continue
            except Exception as exc:
                logger.error(
                    "email_chunk_failed",
                    execution_id=context.execution_id,
                    size=len(batch),
                    error=str(exc),
                )
                self._fail_all(outcome, batch, FailureReason.CHANNEL_SEND_ERROR.value)
                continue
            self._apply_receipt(outcome, batch, receipt)

        logger.info(
            "email_dispatched",
            execution_id=context.execution_id,
            attempted=outcome.attempted_count,
            succeeded=outcome.succeeded_count,
            failed=outcome.failed_count,
        )
        return outcome

    def _build_email(
        self, content: RenderedContent, batch: List[ResolvedRecipient], decoration: Decoration
    ) -> TemplatedEmail:
        settings = self._settings
        meta = decoration.email
        email_type = meta.email_type or settings.default_email_type
        button = decoration.primary_button
        return TemplatedEmail(
            template_name=meta.template_name or settings.default_template_name,
            email_type=email_type,
            from_email=settings.sender_address_for(email_type),
            from_name=meta.sender_name or settings.default_sender_name,
            reply_to=meta.reply_to_address or settings.default_reply_to,
            subject=content.subject,
            body=content.primary_body,
            secondary_body=content.secondary_body,
            button_text=button.text if button else None,
            button_url=button.url if button else None,
            unsubscribe_url=meta.unsubscribe_url or settings.default_unsubscribe_url,
            header_image=meta.header_image,
            body_image=meta.body_image,
            personalizations=[
                EmailPersonalization(email=r.email.strip(), user_id=r.user_id, first=r.first_name)
                for r in batch
            ],
        )

    @staticmethod
    def _fail_all(outcome: ChannelOutcome, batch: List[ResolvedRecipient], reason: str) -> None:
        for recipient in batch:
            outcome.record_failure(recipient.user_id, reason, recipient.email)

    def _apply_receipt(
        self, outcome: ChannelOutcome, batch: List[ResolvedRecipient], receipt: EmailSendReceipt
    ) -> None:
        if receipt.recipient_results is not None:
            by_email = {r.email.strip().lower(): r for r in receipt.recipient_results}
            receipt_id = receipt.message_id
            for recipient in batch:
                result = by_email.get(recipient.email.strip().lower())
                if result is None:
                    outcome.record_failure(recipient.user_id, FailureReason.UNKNOWN_ERROR.value, recipient.email)
                elif result.accepted:
                    outcome.record_success(recipient.user_id, receipt_id)
                    receipt_id = None
                else:
                    reason = result.error_code or FailureReason.PROVIDER_REJECTED.value
                    outcome.record_failure(recipient.user_id, reason, recipient.email)
            return

        if receipt.accepted:
            receipt_id = receipt.message_id
            for recipient in batch:
                outcome.record_success(recipient.user_id, receipt_id)
                receipt_id = None
            return

        logger.warning(
            "email_chunk_rejected",
            size=len(batch),
            error_code=receipt.error_code,
            error=receipt.error_message,
        )
        self._fail_all(outcome, batch, receipt.error_code or FailureReason.PROVIDER_REJECTED.value)
