"""Provider client errors."""
from typing import Any, List, Optional


class ProviderAPIError(Exception):
    """HTTP-level failure talking to a provider."""

    def __init__(self, message: str, status: Optional[int] = None, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.status = status
        self.errors = errors or []

    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500


class ExpoAPIError(ProviderAPIError):
    """Expo push API rejected or failed a request."""


class SendGridAPIError(ProviderAPIError):
    """SendGrid mail send rejected or failed a request."""
