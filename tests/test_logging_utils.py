from __future__ import annotations

import json
import logging

from mockxhr.logging_utils import REDACTED, JsonFormatter, SensitiveDataFilter, configure_logging, redact_headers


def make_record(msg: str = "xhr.send", args=None, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("mockxhr.core", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_redact_headers_masks_credentials() -> None:
    headers = {"Authorization": "Bearer x", "Content-Type": "text/plain", "cookie": "a=b"}

    assert redact_headers(headers) == {
        "Authorization": REDACTED,
        "Content-Type": "text/plain",
        "cookie": REDACTED,
    }


def test_sensitive_filter_redacts_header_extra() -> None:
    record = make_record(headers={"Authorization": "secret", "Accept": "*/*"})

    assert SensitiveDataFilter().filter(record) is True
    assert record.headers == {"Authorization": REDACTED, "Accept": "*/*"}


def test_json_formatter_includes_extra_fields() -> None:
    record = make_record("sent %s", ("/url",), event="xhr.send", method="GET")

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "sent /url"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "mockxhr.core"
    assert payload["event"] == "xhr.send"
    assert payload["method"] == "GET"


def test_configure_logging_writes_json_file(tmp_path) -> None:
    logfile = tmp_path / "logs" / "mockxhr.log"
    root = logging.getLogger()
    previous_handlers = root.handlers[:]
    previous_level = root.level
    root.handlers = []
    try:
        configure_logging(logging.INFO, json_logs=True, logfile=logfile)
        logging.getLogger("mockxhr.test").info(
            "request sent", extra={"event": "xhr.send", "headers": {"Cookie": "x"}}
        )
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = previous_handlers
        root.setLevel(previous_level)

    line = logfile.read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "xhr.send"
    assert payload["headers"] == {"Cookie": REDACTED}
