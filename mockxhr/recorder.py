"""Capture the literal event trace fired by a mock request object."""

from __future__ import annotations

from .core import MockXhr
from .events import PROGRESS_EVENTS, READY_STATE_CHANGE, ProgressEvent


class EventRecorder:
    """Record every event of ``xhr`` and its upload channel as strings.

    Entries look like ``loadstart(0,0,false)``, ``upload.progress(4,4,true)``
    and ``readystatechange(2)``. Listeners registered on the upload channel
    before ``send()`` latch the upload listener flag, so attach the recorder
    before sending when upload events are expected.
    """

    def __init__(self, xhr: MockXhr, *, upload: bool = True) -> None:
        self.xhr = xhr
        self.events: list[str] = []
        self._registrations: list[tuple[object, str, object]] = []
        for name in PROGRESS_EVENTS:
            self._listen(xhr, name, self._record)
            if upload:
                self._listen(xhr.upload, name, self._record_upload)
        self._listen(xhr, READY_STATE_CHANGE, self._record_ready_state)

    def _listen(self, target, name: str, listener) -> None:
        target.add_event_listener(name, listener)
        self._registrations.append((target, name, listener))

    def _record(self, event: ProgressEvent) -> None:
        self.events.append(str(event))

    def _record_upload(self, event: ProgressEvent) -> None:
        self.events.append(f"upload.{event}")

    def _record_ready_state(self, _: ProgressEvent) -> None:
        self.events.append(f"{READY_STATE_CHANGE}({int(self.xhr.ready_state)})")

    def clear(self) -> None:
        self.events.clear()

    def detach(self) -> None:
        for target, name, listener in self._registrations:
            target.remove_event_listener(name, listener)
        self._registrations.clear()

    def __len__(self) -> int:
        return len(self.events)


def record_events(xhr: MockXhr) -> list[str]:
    """Attach a recorder to ``xhr`` and return its live event list."""

    return EventRecorder(xhr).events


__all__ = ["EventRecorder", "record_events"]
