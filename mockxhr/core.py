"""XMLHttpRequest test double: ready states, request/response data and events.

``MockXhr`` supports:
 - events and states
 - ``open()``, ``set_request_header()``, ``send()`` and ``abort()``
 - upload and download progress events
 - response status, status text, headers and body
 - simulating a network error
 - simulating a request timeout

``MockXhr`` does not support:
 - synchronous requests
 - parsing the url and setting the username and password
 - the timeout attribute (call ``set_request_timeout()`` to trigger a timeout)
 - with_credentials
 - response_url (the final request url with redirects)
 - setting response_type (only the empty string response type is used)
 - override_mime_type
 - response_xml
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, ClassVar, Optional, Union

from . import metrics
from .events import EventTarget, ProgressEvent, READY_STATE_CHANGE
from .exceptions import (
    InvalidStateError,
    MockUsageError,
    NotSupportedError,
    SecurityError,
    XhrSyntaxError,
)
from .headers import HeadersContainer
from .scheduling import ManualScheduler, Scheduler
from .status_codes import status_text_for

LOGGER = logging.getLogger(__name__)

SendHook = Callable[["MockXhr"], Any]
CreateHook = Callable[["MockXhr"], Any]

# https://fetch.spec.whatwg.org/#forbidden-header-name
FORBIDDEN_REQUEST_HEADERS: tuple[str, ...] = (
    "Accept-Charset",
    "Accept-Encoding",
    "Access-Control-Request-Headers",
    "Access-Control-Request-Method",
    "Connection",
    "Content-Length",
    "Cookie",
    "Cookie2",
    "Date",
    "DNT",
    "Expect",
    "Host",
    "Keep-Alive",
    "Origin",
    "Referer",
    "TE",
    "Trailer",
    "Transfer-Encoding",
    "Upgrade",
    "Via",
)
FORBIDDEN_HEADER_PATTERN = re.compile(
    r"^(?:" + "|".join(re.escape(name) for name in FORBIDDEN_REQUEST_HEADERS) + r"|Proxy-.*|Sec-.*)$",
    re.IGNORECASE,
)
FORBIDDEN_METHOD_PATTERN = re.compile(r"^(?:CONNECT|TRACE|TRACK)$", re.IGNORECASE)

# https://fetch.spec.whatwg.org/#concept-method-normalize
UPPER_CASE_METHODS: tuple[str, ...] = ("DELETE", "GET", "HEAD", "OPTIONS", "POST", "PUT")

TEXT_CONTENT_TYPE = "text/plain;charset=UTF-8"


class ReadyState(IntEnum):
    """https://xhr.spec.whatwg.org/#states"""

    UNSENT = 0
    OPENED = 1
    HEADERS_RECEIVED = 2
    LOADING = 3
    DONE = 4


@dataclass(frozen=True)
class NetworkErrorResponse:
    """Response variant for failed, aborted or timed-out transport."""

    type: ClassVar[str] = "error"
    status: ClassVar[int] = 0
    status_text: ClassVar[str] = ""
    body: ClassVar[None] = None

    @property
    def headers(self) -> HeadersContainer:
        return HeadersContainer()


@dataclass
class HttpResponse:
    """Response variant built by the mock driver."""

    type: ClassVar[str] = "default"
    status: int = 200
    status_text: str = "OK"
    headers: HeadersContainer = field(default_factory=HeadersContainer)
    body: Any = None


Response = Union[NetworkErrorResponse, HttpResponse]


def is_forbidden_method(method: str) -> bool:
    return bool(FORBIDDEN_METHOD_PATTERN.match(method))


def is_forbidden_request_header(name: str) -> bool:
    return bool(FORBIDDEN_HEADER_PATTERN.match(name))


def normalize_method(method: str) -> str:
    if method.upper() in UPPER_CASE_METHODS:
        return method.upper()
    return method


def extract_content_type(body: Any) -> Optional[str]:
    """https://fetch.spec.whatwg.org/#concept-bodyinit-extract (text and blob-like only)"""

    if isinstance(body, str):
        return TEXT_CONTENT_TYPE
    media_type = getattr(body, "type", None)
    if isinstance(media_type, str) and media_type:
        return media_type
    return None


def body_size(body: Any) -> int:
    if not body:
        return 0
    size = getattr(body, "size", None)
    if isinstance(size, int) and size:
        return size
    try:
        return len(body)
    except TypeError:
        return 0


class MockXhr(EventTarget):
    """Mock of the browser request object with a mock-driver control surface.

    Request methods (``open``, ``set_request_header``, ``send``, ``abort``) are
    called by the code under test. Mock response methods (``respond``,
    ``set_response_headers``, ``download_progress`` and so on) are called by the test,
    usually from an ``on_send`` hook.

    Send hooks are handed to ``MockXhr.scheduler``, a single process-wide
    ``ManualScheduler`` by default. Its queue grows by one task per hook and
    ``send()`` until something calls ``run_pending()`` or ``clear()`` on it.
    Use ``new_mock_xhr(scheduler=...)`` or pass ``scheduler=`` to the
    constructor to keep the queue local to a test.
    """

    UNSENT = ReadyState.UNSENT
    OPENED = ReadyState.OPENED
    HEADERS_RECEIVED = ReadyState.HEADERS_RECEIVED
    LOADING = ReadyState.LOADING
    DONE = ReadyState.DONE

    # Process-wide hooks. Prefer new_mock_xhr() for per-test hooks.
    on_create: ClassVar[Optional[CreateHook]] = None
    on_send: Optional[SendHook] = None
    scheduler: ClassVar[Scheduler] = ManualScheduler()

    def __init__(self, *, scheduler: Optional[Scheduler] = None) -> None:
        super().__init__()
        self._scheduler: Scheduler = scheduler or type(self).scheduler
        self._ready_state = ReadyState.UNSENT
        self._upload = EventTarget()
        self._response: Response = NetworkErrorResponse()
        self._send_flag = False
        self._upload_listener_flag = False
        self._upload_complete_flag = False
        self._timed_out_flag = False
        self.request_headers = HeadersContainer()
        self.method: Optional[str] = None
        self.url: Optional[str] = None
        self.body: Any = None
        self.on_send = None

        # Hook for request object creation
        hook = MockXhr.on_create
        if callable(hook):
            hook(self)

    @classmethod
    def reset_hooks(cls) -> None:
        cls.on_create = None
        cls.on_send = None

    # Read-only attributes

    @property
    def ready_state(self) -> ReadyState:
        return self._ready_state

    @property
    def upload(self) -> EventTarget:
        return self._upload

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def status_text(self) -> str:
        return self._response.status_text

    @property
    def response_type(self) -> str:
        return ""

    @response_type.setter
    def response_type(self, value: str) -> None:
        raise NotSupportedError("Operation not supported.")

    @property
    def response(self) -> Any:
        return self._get_response_text()

    @property
    def response_text(self) -> Any:
        return self._get_response_text()

    @property
    def send_flag(self) -> bool:
        return self._send_flag

    # Request

    def open(self, method: str, url: str) -> None:
        """https://xhr.spec.whatwg.org/#the-open()-method"""

        if is_forbidden_method(method):
            raise SecurityError(f'Method "{method}" forbidden.')
        method = normalize_method(method)
        # Skip parsing the url and setting the username and password

        self._terminate_request()

        self._send_flag = False
        self._upload_listener_flag = False
        self._upload_complete_flag = False
        self._timed_out_flag = False
        self.method = method
        self.url = url
        self.body = None
        self.request_headers.reset()
        self._response = NetworkErrorResponse()
        LOGGER.debug("xhr.open", extra={"event": "xhr.open", "method": method, "url": url})
        if self._ready_state != ReadyState.OPENED:
            self._ready_state = ReadyState.OPENED
            self._fire_ready_state_change()

    def set_request_header(self, name: str, value: str) -> None:
        """https://xhr.spec.whatwg.org/#the-setrequestheader()-method"""

        if self._ready_state != ReadyState.OPENED or self._send_flag:
            raise InvalidStateError("Request headers can only be set after open() and before send().")
        if not isinstance(name, str) or not isinstance(value, str):
            raise XhrSyntaxError("Header name and value must be strings.")

        if is_forbidden_request_header(name):
            LOGGER.debug("xhr.header_dropped", extra={"event": "xhr.header_dropped", "header": name})
            return
        self.request_headers.add_header(name, value.strip())

    def send(self, body: Any = None) -> None:
        """https://xhr.spec.whatwg.org/#the-send()-method"""

        if self._ready_state != ReadyState.OPENED or self._send_flag:
            raise InvalidStateError("send() requires an opened request that is not already sent.")
        if self.method in ("GET", "HEAD"):
            body = None

        if body is not None:
            # Document, BufferSource and FormData bodies are not handled specially
            content_type = extract_content_type(body)
            if content_type is not None and self.request_headers.get_header("Content-Type") is None:
                self.request_headers.add_header("Content-Type", content_type)

        self._upload_listener_flag = self._upload.has_listeners()
        self.body = body
        self._upload_complete_flag = body is None
        self._timed_out_flag = False
        self._send_flag = True
        LOGGER.debug(
            "xhr.send",
            extra={
                "event": "xhr.send",
                "method": self.method,
                "url": self.url,
                "headers": self.request_headers.to_dict(),
                "upload_listeners": self._upload_listener_flag,
            },
        )
        metrics.record_send(self.method, self.url)

        self._fire_event("loadstart", 0, 0)
        if not self._upload_complete_flag and self._upload_listener_flag:
            self._fire_upload_event("loadstart", 0, self._request_body_size())

        # A loadstart handler called open() or abort()
        if self._ready_state != ReadyState.OPENED or not self._send_flag:
            return

        # The rest of the exchange is driven through the mock response methods
        for hook in self._send_hooks():
            self._scheduler.call_soon(hook, self)

    def abort(self) -> None:
        """https://xhr.spec.whatwg.org/#the-abort()-method"""

        self._terminate_request()

        if (
            (self._ready_state == ReadyState.OPENED and self._send_flag)
            or self._ready_state == ReadyState.HEADERS_RECEIVED
            or self._ready_state == ReadyState.LOADING
        ):
            self._request_error_steps("abort")

        if self._ready_state == ReadyState.DONE:
            # No readystatechange event is dispatched.
            self._ready_state = ReadyState.UNSENT
            self._response = NetworkErrorResponse()

    # Response

    def get_response_header(self, name: str) -> Optional[str]:
        return self._response.headers.get_header(name)

    def get_all_response_headers(self) -> str:
        return self._response.headers.get_all()

    # Mock response methods

    def upload_progress(self, transmitted: int) -> None:
        """Fire an upload ``progress`` event for ``transmitted`` bytes."""

        if not self._send_flag or self._upload_complete_flag:
            raise MockUsageError()
        if self._upload_listener_flag:
            self._fire_upload_event("progress", transmitted, self._request_body_size())

    def respond(
        self,
        status: Optional[int] = None,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        status_text: Optional[str] = None,
    ) -> None:
        """Set the response headers and body. Leaves the request in DONE."""

        self.set_response_headers(status, headers, status_text)
        self.set_response_body(body)

    def set_response_headers(
        self,
        status: Optional[int] = None,
        headers: Optional[Mapping[str, str]] = None,
        status_text: Optional[str] = None,
    ) -> None:
        """Set the response status and headers. Moves the request to HEADERS_RECEIVED."""

        if self._ready_state != ReadyState.OPENED or not self._send_flag:
            raise MockUsageError()
        if self.body is not None and not self._upload_complete_flag:
            self._request_end_of_body()
        status = status if isinstance(status, int) else 200
        if status_text is None:
            status_text = status_text_for(status)
        self._process_response(
            HttpResponse(status=status, status_text=status_text, headers=HeadersContainer(headers))
        )

    def download_progress(self, transmitted: int, length: int) -> None:
        """Fire a response ``progress`` event. Moves the request to LOADING."""

        if self._ready_state not in (ReadyState.HEADERS_RECEIVED, ReadyState.LOADING):
            raise MockUsageError()

        if self._ready_state == ReadyState.HEADERS_RECEIVED:
            self._ready_state = ReadyState.LOADING

        # readystatechange fires more often than the state changes, for web compatibility.
        self._fire_ready_state_change()
        self._fire_event("progress", transmitted, length)

    def set_response_body(self, body: Any = None) -> None:
        """Set the response body. Leaves the request in DONE."""

        if not self._send_flag or self._ready_state not in (
            ReadyState.OPENED,
            ReadyState.HEADERS_RECEIVED,
            ReadyState.LOADING,
        ):
            raise MockUsageError()
        if self._ready_state == ReadyState.OPENED:
            # Default "200 OK" response headers
            self.set_response_headers()

        # readystatechange fires more often than the state changes, for web compatibility.
        self._ready_state = ReadyState.LOADING
        self._fire_ready_state_change()

        if isinstance(self._response, HttpResponse):
            self._response.body = body
        self._handle_response_end_of_body()

    def set_network_error(self) -> None:
        """Simulate a network error. Leaves the request in DONE."""

        if not self._send_flag:
            raise MockUsageError()
        self._process_response(NetworkErrorResponse())

    def set_request_timeout(self) -> None:
        """Simulate a request timeout. Leaves the request in DONE."""

        if not self._send_flag:
            raise MockUsageError()
        self._terminate_request()
        self._timed_out_flag = True
        self._process_response(NetworkErrorResponse())

    # Internals

    def _send_hooks(self) -> list[SendHook]:
        # Captured now: a hook replaced before the hand-off runs is not used.
        hooks: list[SendHook] = []
        if callable(self.on_send):
            hooks.append(self.on_send)
        if callable(MockXhr.on_send):
            hooks.append(MockXhr.on_send)
        return hooks

    def _terminate_request(self) -> None:
        self.method = None
        self.url = None

    def _is_network_error_response(self) -> bool:
        return isinstance(self._response, NetworkErrorResponse)

    def _request_body_size(self) -> int:
        return body_size(self.body)

    def _get_response_text(self) -> Any:
        # Only the empty string response type is supported
        if self._ready_state not in (ReadyState.LOADING, ReadyState.DONE):
            return ""
        return self._response.body if self._response.body else ""

    def _fire_event(self, name: str, transmitted: int, length: int) -> None:
        self.dispatch_event(ProgressEvent(name, transmitted, length))

    def _fire_upload_event(self, name: str, transmitted: int, length: int) -> None:
        self._upload.dispatch_event(ProgressEvent(name, transmitted, length))

    def _fire_ready_state_change(self) -> None:
        LOGGER.debug(
            "xhr.readystatechange",
            extra={"event": "xhr.readystatechange", "ready_state": int(self._ready_state)},
        )
        self.dispatch_event(ProgressEvent(READY_STATE_CHANGE))

    def _request_end_of_body(self) -> None:
        """Process request end-of-body: the whole request body was sent."""

        self._upload_complete_flag = True

        # No upload events unless listeners were registered before send()
        if self._upload_listener_flag:
            length = self._request_body_size()
            self._fire_upload_event("progress", length, length)
            self._fire_upload_event("load", length, length)
            self._fire_upload_event("loadend", length, length)

    def _process_response(self, response: Response) -> None:
        """Process response: the response headers were received."""

        self._response = response
        if not self._send_flag:
            return
        self._handle_response_errors()
        if self._is_network_error_response():
            return
        self._ready_state = ReadyState.HEADERS_RECEIVED
        self._fire_ready_state_change()
        if self._ready_state != ReadyState.HEADERS_RECEIVED:
            return
        if self._response.body is not None:
            self._handle_response_end_of_body()
        # Further steps are driven by the mock response methods

    def _handle_response_end_of_body(self) -> None:
        """https://xhr.spec.whatwg.org/#handle-response-end-of-body"""

        self._handle_response_errors()
        if self._is_network_error_response():
            return
        length = body_size(self._response.body)
        self._fire_event("progress", length, length)
        self._ready_state = ReadyState.DONE
        self._send_flag = False
        metrics.record_outcome("load")
        self._fire_ready_state_change()
        self._fire_event("load", length, length)
        self._fire_event("loadend", length, length)

    def _handle_response_errors(self) -> None:
        """https://xhr.spec.whatwg.org/#handle-errors"""

        if not self._send_flag:
            return
        if self._timed_out_flag:
            self._request_error_steps("timeout")
        elif self._is_network_error_response():
            self._request_error_steps("error")

    def _request_error_steps(self, event: str) -> None:
        """https://xhr.spec.whatwg.org/#request-error-steps"""

        self._ready_state = ReadyState.DONE
        self._send_flag = False
        self._response = NetworkErrorResponse()
        LOGGER.debug("xhr.request_error", extra={"event": "xhr.request_error", "type": event})
        metrics.record_outcome(event)
        self._fire_ready_state_change()
        if not self._upload_complete_flag:
            self._upload_complete_flag = True

            # No upload events unless listeners were registered before send()
            if self._upload_listener_flag:
                self._fire_upload_event(event, 0, 0)
                self._fire_upload_event("loadend", 0, 0)
        self._fire_event(event, 0, 0)
        self._fire_event("loadend", 0, 0)


def new_mock_xhr(
    *,
    on_create: Optional[CreateHook] = None,
    on_send: Optional[SendHook] = None,
    scheduler: Optional[Scheduler] = None,
) -> type[MockXhr]:
    """Create a local ``MockXhr`` subclass with its own hooks and scheduler.

    Tests that use a local class do not need to clean up hooks registered on
    ``MockXhr`` itself. The local hooks can also be reassigned on the returned
    class at any time.
    """

    class LocalMockXhr(MockXhr):
        def __init__(self, *, scheduler: Optional[Scheduler] = None) -> None:
            super().__init__(scheduler=scheduler)

            # Call the local on_create hook on the new instance
            hook = LocalMockXhr.on_create
            if callable(hook):
                hook(self)

        def _send_hooks(self) -> list[SendHook]:
            hooks = super()._send_hooks()
            if callable(LocalMockXhr.on_send):
                hooks.append(LocalMockXhr.on_send)
            return hooks

    LocalMockXhr.on_create = on_create
    LocalMockXhr.on_send = on_send
    LocalMockXhr.scheduler = scheduler or ManualScheduler()
    return LocalMockXhr


__all__ = [
    "FORBIDDEN_REQUEST_HEADERS",
    "HttpResponse",
    "MockXhr",
    "NetworkErrorResponse",
    "ReadyState",
    "Response",
    "body_size",
    "extract_content_type",
    "is_forbidden_method",
    "is_forbidden_request_header",
    "new_mock_xhr",
    "normalize_method",
]
