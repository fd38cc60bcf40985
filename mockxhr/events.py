"""Progress event values and the listener registry used by both event channels."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

LOGGER = logging.getLogger(__name__)

PROGRESS_EVENTS: tuple[str, ...] = (
    "loadstart",
    "progress",
    "abort",
    "error",
    "load",
    "timeout",
    "loadend",
)
READY_STATE_CHANGE = "readystatechange"


@dataclass(frozen=True)
class ProgressEvent:
    """One lifecycle or progress notification."""

    type: str
    loaded: int = 0
    total: int = 0

    @property
    def length_computable(self) -> bool:
        return self.total > 0

    def __str__(self) -> str:
        computable = "true" if self.length_computable else "false"
        return f"{self.type}({self.loaded},{self.total},{computable})"


Listener = Callable[[ProgressEvent], object]


class EventTarget:
    """Named-event subscription and synchronous dispatch.

    Besides listeners added with :meth:`add_event_listener`, a callable
    stored on the ``on<type>`` attribute (``onload``, ``onreadystatechange``
    and so on) is invoked first for each dispatch of that event type.
    """

    def __init__(self) -> None:
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)

    def add_event_listener(self, name: str, listener: Listener) -> None:
        self._listeners[name].append(listener)

    def remove_event_listener(self, name: str, listener: Listener) -> None:
        listeners = self._listeners.get(name)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            return
        if not listeners:
            del self._listeners[name]

    def has_listeners(self) -> bool:
        if any(self._listeners.values()):
            return True
        return any(
            callable(getattr(self, f"on{name}", None))
            for name in (*PROGRESS_EVENTS, READY_STATE_CHANGE)
        )

    def dispatch_event(self, event: ProgressEvent) -> None:
        # Listeners added or removed by a handler take effect on the next dispatch.
        handlers: list[Listener] = []
        property_handler = getattr(self, f"on{event.type}", None)
        if callable(property_handler):
            handlers.append(property_handler)
        handlers.extend(self._listeners.get(event.type, ()))
        LOGGER.debug(
            "event.dispatch",
            extra={"event": "xhr.dispatch", "type": event.type, "listeners": len(handlers)},
        )
        for handler in handlers:
            handler(event)


__all__ = [
    "EventTarget",
    "Listener",
    "PROGRESS_EVENTS",
    "ProgressEvent",
    "READY_STATE_CHANGE",
]
