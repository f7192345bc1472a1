"""
Failure Reason Enum.

Reason codes attached to per-recipient failures. Providers may report
their own codes (e.g. ``DeviceNotRegistered``); those are carried as plain
strings next to these.
"""
from enum import Enum


class FailureReason(str, Enum):
    """Per-recipient failure reason codes."""

    INVALID_TOKEN_FORMAT = "InvalidTokenFormat"
    NO_PUSH_TOKEN = "NoPushToken"
    NO_EMAIL_ADDRESS = "NoEmailAddress"
    CHANNEL_SEND_ERROR = "ChannelSendError"
    TIMEOUT = "Timeout"
    UNKNOWN_ERROR = "UnknownError"
    UNKNOWN_USER = "UnknownUser"
    PROVIDER_REJECTED = "ProviderRejected"
