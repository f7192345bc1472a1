"""Notification channel gateways.

Keep this package import-light: avoid importing network-backed implementations
at module import time (e.g., aiohttp-based adapters). Import concrete gateways
directly from their modules when needed.
"""

from .mock_notification_service import MockEmailGateway, MockPushGateway

__all__ = ["MockEmailGateway", "MockPushGateway"]
