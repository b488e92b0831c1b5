"""Synchronous event source: routes document change events to listeners."""

import threading
from typing import Any, Dict, List, Optional, Protocol

from comment_notifier.domain.events import DocumentChangeEvent
from comment_notifier.logging import get_logger

logger = get_logger(__name__, component="observation")


class EventListener(Protocol):
    """A component reacting to document change events."""

    @property
    def name(self) -> str:
        ...

    @property
    def events(self) -> List[DocumentChangeEvent]:
        ...

    def on_event(self, event: DocumentChangeEvent, source: Any, data: Any = None) -> Any:
        ...


class ObservationManager:
    """Registry of listeners, notified on the caller's thread.

    A listener receives an event when one of its registered event templates
    matches it. An exception escaping a listener is logged and does not stop
    the other listeners from being notified.
    """

    def __init__(self):
        self._listeners: Dict[str, EventListener] = {}
        self._lock = threading.Lock()

    def add_listener(self, listener: EventListener) -> None:
        """Register a listener.

        Raises:
            ValueError: If a listener with the same name is already registered
        """
        with self._lock:
            if listener.name in self._listeners:
                raise ValueError(f"Listener already registered: {listener.name}")
            self._listeners[listener.name] = listener

        logger.info(
            f"Registered listener {listener.name}",
            extra={
                "event": "observation.listener.added",
                "listener": listener.name,
                "event_types": [repr(e) for e in listener.events],
            },
        )

    def remove_listener(self, name: str) -> Optional[EventListener]:
        with self._lock:
            return self._listeners.pop(name, None)

    def get_listener(self, name: str) -> Optional[EventListener]:
        return self._listeners.get(name)

    @property
    def listeners(self) -> List[EventListener]:
        with self._lock:
            return list(self._listeners.values())

    def notify(self, event: DocumentChangeEvent, source: Any, data: Any = None) -> int:
        """Deliver an event to every interested listener.

        Returns:
            Number of listeners the event was delivered to
        """
        delivered = 0
        for listener in self.listeners:
            if not any(template.matches(event) for template in listener.events):
                continue

            delivered += 1
            try:
                listener.on_event(event, source, data)
            except Exception as e:
                logger.error(
                    f"Listener {listener.name} failed on {event!r}: {e}",
                    exc_info=True,
                    extra={
                        "event": "observation.listener.failure",
                        "listener": listener.name,
                        "error_type": type(e).__name__,
                    },
                )

        return delivered
