"""
Message Bus

In-process hub routing domain events to their subscribers. The engine
only emits events; delivery to connected clients (websocket, push, email)
is the business of whoever subscribes here.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Message bus for domain events

    Events: Multiple handlers per event (1:N). A handler registered for a
    base event class also receives its subclasses.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Register an event handler; registering the same handler twice is a no-op"""
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Registered event handler {handler.__name__} for {event_type.__name__}")

    def subscribe(self, event_type: Type[DomainEvent]):
        """Decorator form of register_event_handler"""

        def decorator(handler: EventHandler) -> EventHandler:
            self.register_event_handler(event_type, handler)
            return handler

        return decorator

    def clear(self):
        """Drop every registration (used by tests)"""
        self._event_handlers.clear()

    def handlers_for(self, event: DomainEvent) -> List[EventHandler]:
        handlers: List[EventHandler] = []
        for event_type in type(event).__mro__:
            handlers.extend(self._event_handlers.get(event_type, []))
        return handlers

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type will be called.
        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            event_name = type(event).__name__
            handlers = self.handlers_for(event)

            if not handlers:
                logger.warning(f"No handlers registered for event {event_name}")
                continue

            logger.info(f"Publishing event: {event_name} (ID: {event.event_id})")

            for handler in handlers:
                try:
                    handler(event)
                    logger.debug(f"Event {event_name} handled by {handler.__name__}")
                except Exception as e:
                    logger.error(
                        f"Error in event handler {handler.__name__} "
                        f"for event {event_name}: {e}",
                        exc_info=True
                    )


# Global message bus instance
message_bus = MessageBus()
