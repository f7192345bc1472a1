from .client import EXPO_PUSH_URL, MAX_MESSAGES_PER_REQUEST, ExpoPushClient, is_expo_push_token

__all__ = ["EXPO_PUSH_URL", "MAX_MESSAGES_PER_REQUEST", "ExpoPushClient", "is_expo_push_token"]
