"""
Expo Push Gateway.

Sends push batches through the Expo push API.
"""
from typing import Any, Dict, List, Optional, Sequence

from core.application.interfaces import IPushGateway, PushMessage, PushTicket
from core.settings.sections.push import PushSettings
from gyld_sdk.expo import ExpoPushClient
from gyld_sdk.logging import get_logger

logger = get_logger(__name__)


def to_expo_message(message: PushMessage) -> Dict[str, Any]:
    """Expo wire form of a push message."""
    payload: Dict[str, Any] = {
        "to": message.to,
        "title": message.title,
        "body": message.body,
        "data": message.data,
        "sound": message.sound,
        "priority": message.priority,
    }
    if message.subtitle:
        payload["subtitle"] = message.subtitle
    if message.image_url:
        payload["richContent"] = {"image": message.image_url}
    return payload


def to_push_ticket(ticket: Dict[str, Any]) -> PushTicket:
    details = ticket.get("details") or {}
    return PushTicket(
        status=ticket.get("status", "error"),
        id=ticket.get("id"),
        message=ticket.get("message"),
        error_code=details.get("error"),
    )


class ExpoPushGateway(IPushGateway):
    """IPushGateway over the Expo push API."""

    def __init__(self, settings: PushSettings, client: Optional[ExpoPushClient] = None):
        self.settings = settings
        self.client = client or ExpoPushClient(
            access_token=settings.access_token,
            api_url=settings.api_url,
            timeout=settings.request_timeout,
        )
        logger.info("expo_push_gateway_initialized", api_url=settings.api_url)

    async def send_batch(self, messages: Sequence[PushMessage]) -> List[PushTicket]:
        tickets = await self.client.send_push_notifications([to_expo_message(m) for m in messages])
        return [to_push_ticket(t) for t in tickets]
