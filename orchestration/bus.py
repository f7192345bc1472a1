"""Event bus - EventBusProtocol and InMemoryEventBus."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from gyld_sdk.logging import get_logger

from .events import Event

EventHandler = Callable[[Event], Awaitable[None]]

ALL_EVENTS = "*"


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations."""

    async def publish(self, event: Event) -> None:
        ...

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        ...


class InMemoryEventBus(EventBusProtocol):
    """
    In-process event bus.

    Handlers subscribed to ``"*"`` receive every event. A failing handler
    is logged and never affects the publisher or the other handlers.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._logger = get_logger("orchestration.event_bus")

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event name, or to ``"*"`` for all events."""
        self._handlers.setdefault(event_name, []).append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, event: Event) -> None:
        """Deliver an event to its handlers in subscription order."""
        handlers = self._handlers.get(event.name, []) + self._handlers.get(ALL_EVENTS, [])
        if not handlers:
            return

        self._logger.debug(
            "publishing_event",
            event_name=event.name,
            execution_id=event.metadata.execution_id,
            handler_count=len(handlers),
        )

        for handler in handlers:
            try:
                await handler(event)
            except Exception as exc:
                self._logger.error(
                    "handler_error",
                    event_name=event.name,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(exc),
                    exc_info=True,
                )
