"""
Change Bus — in-process, synchronous delivery of store change events.

Behavioral Contract:
- Listeners are called in subscription order, on the emitting thread
- Delivery happens after the write it describes has been committed
- A listener that raises is logged and skipped; it never fails the write
"""

import logging
from typing import Callable, List

from screenplay.models.events import ChangeEvent

logger = logging.getLogger(__name__)

ChangeListener = Callable[[ChangeEvent], None]


class ChangeBus:
    """Owned by one store instance. No module-level singleton."""

    def __init__(self):
        self._listeners: List[ChangeListener] = []

    def subscribe(self, listener: ChangeListener) -> ChangeListener:
        """Register a listener. Returns it so it can be used as a decorator."""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: ChangeListener) -> bool:
        """Remove a listener. Returns False if it was not subscribed."""
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, event: ChangeEvent) -> None:
        # Snapshot the list so listeners may unsubscribe themselves mid-delivery
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    f"Change listener {listener!r} failed on "
                    f"{event.entity_kind.value} {event.type} event"
                )
