"""SendGrid v3 mail send client."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from gyld_sdk.errors import SendGridAPIError
from gyld_sdk.logging import get_logger

logger = get_logger("gyld_sdk.sendgrid")

SENDGRID_MAIL_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


@dataclass(frozen=True)
class SendGridResponse:
    """Accepted send. SendGrid answers 202 with an empty body."""

    status: int
    message_id: Optional[str] = None


class SendGridClient:
    """Async client for SendGrid's ``POST /v3/mail/send``."""

    def __init__(self, api_key: str, api_url: str = SENDGRID_MAIL_SEND_URL, timeout: float = 15.0):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def send(self, payload: Dict[str, Any]) -> SendGridResponse:
        """
        Send one mail payload.

        Raises:
            SendGridAPIError: Non-2xx response; ``errors`` carries the
                provider's error list
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.api_url, json=payload, headers=headers) as response:
                if response.status >= 400:
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        body = {}
                    errors = body.get("errors", []) if isinstance(body, dict) else []
                    raise SendGridAPIError(
                        f"SendGrid returned {response.status}",
                        status=response.status,
                        errors=errors,
                    )
                message_id = response.headers.get("X-Message-Id")

        logger.debug("sendgrid_mail_sent", status=response.status, message_id=message_id)
        return SendGridResponse(status=response.status, message_id=message_id)
