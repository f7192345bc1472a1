"""
Channel Enum.

Delivery media a notification can travel through.
"""
from enum import Enum


class Channel(str, Enum):
    """Delivery channel values."""

    PUSH = "push"
    EMAIL = "email"
