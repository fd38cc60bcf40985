from __future__ import annotations

import pytest

from mockxhr.core import MockXhr
from mockxhr.recorder import record_events


def assert_network_error_response(xhr: MockXhr) -> None:
    assert xhr.get_all_response_headers() == ""
    assert xhr.status == 0
    assert xhr.status_text == ""
    assert xhr.response == ""
    assert xhr.response_text == ""


def test_abort_after_open_fires_nothing(xhr: MockXhr) -> None:
    xhr.open("GET", "/url")
    events = record_events(xhr)

    xhr.abort()

    assert events == []
    assert xhr.ready_state == MockXhr.OPENED


def test_abort_before_open_is_a_no_op(xhr: MockXhr) -> None:
    events = record_events(xhr)

    xhr.abort()

    assert events == []
    assert xhr.ready_state == MockXhr.UNSENT


@pytest.mark.parametrize("stage", ["sent", "headers_received", "loading"])
def test_abort_during_exchange(xhr: MockXhr, stage: str) -> None:
    xhr.open("GET", "/url")
    xhr.send()
    if stage in ("headers_received", "loading"):
        xhr.set_response_headers()
    if stage == "loading":
        xhr.download_progress(2, 8)
    events = record_events(xhr)

    xhr.abort()

    assert events == ["readystatechange(4)", "abort(0,0,false)", "loadend(0,0,false)"]
    assert_network_error_response(xhr)
    assert xhr.ready_state == MockXhr.UNSENT
    assert xhr.send_flag is False


def test_abort_after_done_resets_silently(xhr: MockXhr) -> None:
    xhr.open("GET", "/url")
    xhr.send()
    xhr.respond(200, {"R-Header": "1"}, "body")
    events = record_events(xhr)

    xhr.abort()

    assert events == []
    assert_network_error_response(xhr)
    assert xhr.ready_state == MockXhr.UNSENT


def test_abort_with_request_body_fires_upload_abort(xhr: MockXhr) -> None:
    xhr.open("POST", "/url")
    events = record_events(xhr)
    xhr.send("body")

    xhr.abort()

    assert events == [
        "loadstart(0,0,false)",
        "upload.loadstart(0,4,true)",
        "readystatechange(4)",
        "upload.abort(0,0,false)",
        "upload.loadend(0,0,false)",
        "abort(0,0,false)",
        "loadend(0,0,false)",
    ]


def test_abort_clears_method_and_url(xhr: MockXhr) -> None:
    xhr.open("GET", "/url")
    xhr.send()

    xhr.abort()

    assert xhr.method is None
    assert xhr.url is None


def test_abort_during_loadstart_cancels_send_hooks(xhr: MockXhr) -> None:
    called: list[MockXhr] = []
    xhr.on_send = called.append
    MockXhr.on_send = called.append

    xhr.open("GET", "/url")
    xhr.add_event_listener("loadstart", lambda event: xhr.abort())
    xhr.send()

    assert xhr.ready_state == MockXhr.UNSENT
    assert MockXhr.scheduler.run_pending() == 0
    assert called == []


def test_nested_open_during_abort(xhr: MockXhr) -> None:
    states: list[int] = []
    abort_flag = False

    def on_ready_state_change(event) -> None:
        states.append(xhr.ready_state)
        if abort_flag:
            xhr.open("GET", "/url")

    xhr.onreadystatechange = on_ready_state_change
    xhr.open("GET", "/url")
    xhr.send()
    abort_flag = True
    xhr.abort()

    assert states == [MockXhr.OPENED, MockXhr.DONE, MockXhr.OPENED]
    assert xhr.ready_state == MockXhr.OPENED


def test_nested_open_and_send_during_abort(xhr: MockXhr) -> None:
    states: list[int] = []
    abort_flag = False

    def on_ready_state_change(event) -> None:
        nonlocal abort_flag
        states.append(xhr.ready_state)
        if abort_flag:
            abort_flag = False
            xhr.open("GET", "/url")
            xhr.send()

    xhr.onreadystatechange = on_ready_state_change
    xhr.open("GET", "/url")
    xhr.send()
    abort_flag = True
    xhr.abort()

    assert states == [MockXhr.OPENED, MockXhr.DONE, MockXhr.OPENED]
    assert xhr.ready_state == MockXhr.OPENED
    assert xhr.send_flag is True
