"""
events/dispatcher.py - Instance-scoped event dispatcher

Each TransactionStack gets its own dispatcher, so hosts with several
documents (one stack each) keep separate listener sets and histories.
"""

from typing import Callable, Dict, List, Optional
import logging

from .events import StackEvent, StackEventType


logger = logging.getLogger("tps.events")


# Type alias for event handlers
EventHandler = Callable[[StackEvent], None]


class EventDispatcher:
    """
    Observer registry for stack events.

    Features:
    - Type-specific subscriptions
    - Wildcard subscriptions (receive all events)
    - Event history (configurable depth)

    Usage:
        dispatcher = EventDispatcher(stack_id="document-1")
        dispatcher.subscribe(StackEventType.TRANSACTION_UNDONE, refresh_toolbar)
        dispatcher.subscribe_all(log_handler)

    Handler exceptions are logged and dropped; a failing listener never
    interrupts the stack operation that emitted the event.
    """

    def __init__(self, stack_id: str = "", max_history: int = 100):
        self._stack_id = stack_id
        # 0 or less keeps no history
        self._max_history = max_history

        # event_type -> handlers
        self._handlers: Dict[StackEventType, List[EventHandler]] = {}
        self._wildcard_handlers: List[EventHandler] = []

        self._history: List[StackEvent] = []
        self._subscription_counter = 0
        self._paused = False

        logger.debug(f"EventDispatcher created for stack_id={stack_id}")

    @property
    def stack_id(self) -> str:
        """Get the associated stack ID."""
        return self._stack_id

    def subscribe(self, event_type: StackEventType, handler: EventHandler) -> str:
        """
        Subscribe to events of a specific type.

        Returns:
            Subscription ID, or "" if the handler was already subscribed
        """
        handlers = self._handlers.setdefault(event_type, [])
        if handler in handlers:
            return ""

        handlers.append(handler)
        self._subscription_counter += 1
        sub_id = f"sub_{self._subscription_counter}"
        logger.debug(f"Subscribed {sub_id} to {event_type.value}")
        return sub_id

    def subscribe_all(self, handler: EventHandler) -> str:
        """Subscribe to all events (wildcard)."""
        if handler in self._wildcard_handlers:
            return ""

        self._wildcard_handlers.append(handler)
        self._subscription_counter += 1
        sub_id = f"sub_all_{self._subscription_counter}"
        logger.debug(f"Subscribed {sub_id} as wildcard")
        return sub_id

    def unsubscribe(self, event_type: StackEventType, handler: EventHandler) -> bool:
        """Remove a type-specific handler. Returns True if it was registered."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"Unsubscribed handler from {event_type.value}")
            return True
        return False

    def unsubscribe_all(self, handler: EventHandler) -> bool:
        """Remove a wildcard handler. Returns True if it was registered."""
        if handler in self._wildcard_handlers:
            self._wildcard_handlers.remove(handler)
            logger.debug("Unsubscribed wildcard handler")
            return True
        return False

    def emit(self, event: StackEvent) -> None:
        """Emit an event to all subscribers."""
        if self._paused:
            logger.debug(f"Dispatcher paused, dropping: {event.event_type.value}")
            return

        if not event.stack_id:
            event.stack_id = self._stack_id

        if self._max_history > 0:
            self._history.append(event)
            del self._history[:-self._max_history]

        logger.debug(
            f"Emitting {event.event_type.value} "
            f"(stack={event.stack_id}, cursor={event.cursor}, size={event.size})"
        )

        # Copy so handlers may unsubscribe themselves
        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Handler failed for {event.event_type.value}: {e}")

        for handler in list(self._wildcard_handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Wildcard handler failed: {e}")

    def pause(self) -> None:
        """Pause event emission (events are dropped)."""
        self._paused = True
        logger.debug("EventDispatcher paused")

    def resume(self) -> None:
        """Resume event emission."""
        self._paused = False
        logger.debug("EventDispatcher resumed")

    @property
    def is_paused(self) -> bool:
        return self._paused

    def clear_handlers(self, event_type: Optional[StackEventType] = None) -> None:
        """Clear handlers for one event type, or all handlers."""
        if event_type:
            self._handlers.pop(event_type, None)
            logger.debug(f"Cleared handlers for {event_type.value}")
        else:
            self._handlers.clear()
            self._wildcard_handlers.clear()
            logger.debug("Cleared all handlers")

    def get_history(
        self,
        limit: int = 20,
        event_type: Optional[StackEventType] = None,
    ) -> List[StackEvent]:
        """
        Get event history.

        Args:
            limit: Maximum events to return
            event_type: Filter by type (optional)

        Returns:
            Most recent events, oldest first
        """
        if limit <= 0:
            return []

        history = self._history
        if event_type:
            history = [e for e in history if e.event_type == event_type]
        return history[-limit:]

    def clear_history(self) -> None:
        self._history.clear()

    @property
    def handler_count(self) -> int:
        """Get total number of registered handlers."""
        count = sum(len(handlers) for handlers in self._handlers.values())
        return count + len(self._wildcard_handlers)

    @property
    def event_count(self) -> int:
        """Get number of events in history."""
        return len(self._history)
