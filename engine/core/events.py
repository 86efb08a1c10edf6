"""
Typed event bus for decoupled communication.

Event types are Enums so that publishers and subscribers share a closed
vocabulary instead of magic strings.

Usage:
    class BattleEvent(Enum):
        TURN_RESOLVED = auto()

    event_bus.subscribe(BattleEvent.TURN_RESOLVED, on_turn)
    event_bus.publish(BattleEvent.TURN_RESOLVED, state=state, logs=logs)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


@dataclass
class _Subscription:
    priority: int
    handler: EventHandler
    one_shot: bool


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Priority ordering (higher first, FIFO among equals)
    - One-shot handlers
    - Event consumption (stops propagation)
    - Events published from inside a handler are queued, not nested
    """

    def __init__(self):
        self._handlers: dict[Enum, list[_Subscription]] = {}
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
        """
        subscriptions = self._handlers.setdefault(event_type, [])
        index = len(subscriptions)
        for i, existing in enumerate(subscriptions):
            if priority > existing.priority:
                index = i
                break
        subscriptions.insert(index, _Subscription(priority, handler, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        if event_type not in self._handlers:
            return
        self._handlers[event_type] = [
            s for s in self._handlers[event_type] if s.handler != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Clear all handlers, or only those for ``event_type``."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        subscriptions = self._handlers.get(event.type)
        if subscriptions:
            self._is_publishing = True
            fired: list[_Subscription] = []
            try:
                for subscription in list(subscriptions):
                    try:
                        subscription.handler(event)
                    except Exception:
                        # Handler errors are logged, never propagated to the publisher
                        logger.exception(f"Error in event handler for {event.type}")
                    if subscription.one_shot:
                        fired.append(subscription)
                    if event.consumed:
                        break
            finally:
                for subscription in fired:
                    if subscription in subscriptions:
                        subscriptions.remove(subscription)
                self._is_publishing = False

        while self._event_queue and not self._is_publishing:
            self._dispatch(self._event_queue.pop(0))
