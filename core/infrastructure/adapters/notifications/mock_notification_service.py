"""
Mock channel gateways.

Used when a provider is disabled, and in tests: sends nothing, records
every message, and acknowledges each one.
"""
from typing import List, Sequence

from core.application.interfaces import (
    EmailSendReceipt,
    IEmailGateway,
    IPushGateway,
    PushMessage,
    PushTicket,
    TemplatedEmail,
)
from gyld_sdk.logging import get_logger

logger = get_logger(__name__)


class MockPushGateway(IPushGateway):
    """Acknowledges every push message without sending it."""

    def __init__(self):
        self.batches: List[List[PushMessage]] = []
        logger.info("mock_push_gateway_initialized")

    @property
    def messages(self) -> List[PushMessage]:
        return [m for batch in self.batches for m in batch]

    async def send_batch(self, messages: Sequence[PushMessage]) -> List[PushTicket]:
        self.batches.append(list(messages))
        offset = len(self.messages) - len(messages)
        logger.info("mock_push_batch", message_count=len(messages))
        return [PushTicket(status="ok", id=f"mock-ticket-{offset + i}") for i in range(len(messages))]


class MockEmailGateway(IEmailGateway):
    """Accepts every email without sending it."""

    def __init__(self):
        self.emails: List[TemplatedEmail] = []
        logger.info("mock_email_gateway_initialized")

    async def send(self, email: TemplatedEmail) -> EmailSendReceipt:
        self.emails.append(email)
        logger.info(
            "mock_email_send",
            template_name=email.template_name,
            recipient_count=len(email.personalizations),
        )
        return EmailSendReceipt(accepted=True, message_id=f"mock-message-{len(self.emails)}")
