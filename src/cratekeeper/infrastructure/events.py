"""In-process event publishing.

Hey future me - publish() never raises because a subscriber failed. The
state change the event describes is already committed; a broken subscriber
is logged and the next one still runs.
"""

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable

from cratekeeper.domain.entities import DomainEvent
from cratekeeper.domain.ports import IEventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class InMemoryEventPublisher(IEventPublisher):
    """Dispatches events to subscribers registered per event type."""

    def __init__(self, keep_history: bool = False) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._keep_history = keep_history
        self.published: list[DomainEvent] = []

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register a handler for an event type (and its subclasses)."""
        self._handlers[event_type].append(handler)

    async def publish(self, event: DomainEvent) -> None:
        """Publish one event to every matching handler."""
        if self._keep_history:
            self.published.append(event)

        logger.debug(f"Publishing {type(event).__name__}")
        for event_type, handlers in list(self._handlers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in handlers:
                try:
                    await handler(event)
                except Exception as e:
                    logger.error(
                        f"Event handler {getattr(handler, '__name__', handler)} failed "
                        f"for {type(event).__name__}: {e}",
                        exc_info=True,
                    )
