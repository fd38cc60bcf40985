from __future__ import annotations

from mockxhr.core import MockXhr
from mockxhr.recorder import EventRecorder


def test_recorder_formats_both_channels(xhr: MockXhr) -> None:
    recorder = EventRecorder(xhr)

    xhr.open("POST", "/url")
    xhr.send("data")
    xhr.upload_progress(2)

    assert recorder.events == [
        "readystatechange(1)",
        "loadstart(0,0,false)",
        "upload.loadstart(0,4,true)",
        "upload.progress(2,4,true)",
    ]
    assert len(recorder) == 4


def test_recorder_without_upload_channel_keeps_listener_flag_unset(xhr: MockXhr) -> None:
    recorder = EventRecorder(xhr, upload=False)

    xhr.open("POST", "/url")
    xhr.send("data")
    xhr.respond()

    assert not any(entry.startswith("upload.") for entry in recorder.events)
    assert recorder.events[-1] == "loadend(0,0,false)"


def test_recorder_clear_and_detach(xhr: MockXhr) -> None:
    recorder = EventRecorder(xhr)
    xhr.open("GET", "/url")
    recorder.clear()
    assert recorder.events == []

    recorder.detach()
    xhr.send()

    assert recorder.events == []
    assert xhr.has_listeners() is False
    assert xhr.upload.has_listeners() is False
