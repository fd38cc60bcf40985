from __future__ import annotations

import pytest

from mockxhr.events import EventTarget, ProgressEvent


def test_progress_event_length_computable() -> None:
    assert ProgressEvent("progress", 2, 8).length_computable is True
    assert ProgressEvent("loadstart").length_computable is False
    assert str(ProgressEvent("load", 4, 4)) == "load(4,4,true)"
    assert str(ProgressEvent("loadend")) == "loadend(0,0,false)"


def test_progress_event_is_immutable() -> None:
    event = ProgressEvent("progress", 1, 2)
    with pytest.raises(AttributeError):
        event.loaded = 5  # type: ignore[misc]


def test_dispatch_in_registration_order_with_duplicates() -> None:
    target = EventTarget()
    calls: list[str] = []

    def first(event: ProgressEvent) -> None:
        calls.append(f"first:{event.type}")

    def second(event: ProgressEvent) -> None:
        calls.append(f"second:{event.type}")

    target.add_event_listener("load", first)
    target.add_event_listener("load", second)
    target.add_event_listener("load", first)
    target.dispatch_event(ProgressEvent("load"))

    assert calls == ["first:load", "second:load", "first:load"]


def test_remove_listener_removes_one_registration() -> None:
    target = EventTarget()
    calls: list[str] = []
    listener = lambda event: calls.append(event.type)  # noqa: E731

    target.add_event_listener("error", listener)
    target.add_event_listener("error", listener)
    target.remove_event_listener("error", listener)
    target.dispatch_event(ProgressEvent("error"))
    assert calls == ["error"]

    target.remove_event_listener("error", listener)
    target.remove_event_listener("error", listener)
    assert target.has_listeners() is False


def test_listener_added_during_dispatch_waits_for_next_dispatch() -> None:
    target = EventTarget()
    calls: list[str] = []

    def late(event: ProgressEvent) -> None:
        calls.append("late")

    def register(event: ProgressEvent) -> None:
        calls.append("register")
        target.add_event_listener("progress", late)

    target.add_event_listener("progress", register)
    target.dispatch_event(ProgressEvent("progress"))
    assert calls == ["register"]

    target.dispatch_event(ProgressEvent("progress"))
    assert calls == ["register", "register", "late"]


def test_property_handler_runs_before_listeners() -> None:
    target = EventTarget()
    calls: list[str] = []
    target.add_event_listener("load", lambda event: calls.append("listener"))
    target.onload = lambda event: calls.append("property")  # type: ignore[attr-defined]

    target.dispatch_event(ProgressEvent("load"))

    assert calls == ["property", "listener"]


def test_has_listeners() -> None:
    target = EventTarget()
    assert target.has_listeners() is False
    target.add_event_listener("timeout", lambda event: None)
    assert target.has_listeners() is True

    other = EventTarget()
    other.onprogress = lambda event: None  # type: ignore[attr-defined]
    assert other.has_listeners() is True


def test_handler_exceptions_propagate() -> None:
    target = EventTarget()

    def boom(event: ProgressEvent) -> None:
        raise RuntimeError("handler failed")

    target.add_event_listener("load", boom)
    with pytest.raises(RuntimeError, match="handler failed"):
        target.dispatch_event(ProgressEvent("load"))
