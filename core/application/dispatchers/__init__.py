"""Channel dispatchers."""
from .base import ChannelDispatcher, DispatchContext
from .email_dispatcher import EmailDispatcher
from .push_dispatcher import PushDispatcher

__all__ = ["ChannelDispatcher", "DispatchContext", "EmailDispatcher", "PushDispatcher"]
