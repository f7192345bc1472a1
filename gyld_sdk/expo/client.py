"""Expo push API client."""

from typing import Any, Dict, List

import aiohttp

from gyld_sdk.errors import ExpoAPIError
from gyld_sdk.logging import get_logger

logger = get_logger("gyld_sdk.expo")

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
MAX_MESSAGES_PER_REQUEST = 100
TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")


def is_expo_push_token(token: Any) -> bool:
    """Return True if ``token`` has the Expo push token shape."""
    if not isinstance(token, str):
        return False
    return token.startswith(TOKEN_PREFIXES) and token.endswith("]") and len(token) > len("ExpoPushToken[]")


class ExpoPushClient:
    """
    Async client for ``POST /--/api/v2/push/send``.

    One call sends up to 100 messages and returns the tickets in message
    order. Errors for the request as a whole raise ``ExpoAPIError``.
    """

    def __init__(self, access_token: str = "", api_url: str = EXPO_PUSH_URL, timeout: float = 10.0):
        self.access_token = access_token
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def send_push_notifications(self, messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Send a batch of push messages.

        Args:
            messages: Expo message dicts (``to``, ``title``, ``body``, ...)

        Returns:
            Ticket dicts, positionally aligned with ``messages``

        Raises:
            ExpoAPIError: Non-2xx response or request-level errors
        """
        if len(messages) > MAX_MESSAGES_PER_REQUEST:
            raise ValueError(f"At most {MAX_MESSAGES_PER_REQUEST} messages per request")

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.api_url, json=messages, headers=self._headers()) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = {}
                if response.status >= 400:
                    errors = body.get("errors", []) if isinstance(body, dict) else []
                    raise ExpoAPIError(
                        f"Expo push API returned {response.status}",
                        status=response.status,
                        errors=errors,
                    )

        if isinstance(body, dict) and body.get("errors") and not body.get("data"):
            raise ExpoAPIError("Expo push API rejected the request", status=200, errors=body["errors"])

        tickets = body.get("data", []) if isinstance(body, dict) else []
        logger.debug("expo_batch_sent", message_count=len(messages), ticket_count=len(tickets))
        return tickets
