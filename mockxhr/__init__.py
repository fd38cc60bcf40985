"""mockxhr package providing an in-process XMLHttpRequest test double."""

from __future__ import annotations

# Semantic version for package consumers.
__version__ = "0.1.0"

from .core import HttpResponse, MockXhr, NetworkErrorResponse, ReadyState, new_mock_xhr  # noqa: E402
from .events import EventTarget, ProgressEvent  # noqa: E402
from .exceptions import (  # noqa: E402
    InvalidStateError,
    MockUsageError,
    MockXhrError,
    NotSupportedError,
    SecurityError,
    XhrSyntaxError,
)
from .headers import HeadersContainer  # noqa: E402
from .recorder import EventRecorder, record_events  # noqa: E402
from .scheduling import AsyncioScheduler, ManualScheduler  # noqa: E402

__all__ = [
    "__version__",
    "AsyncioScheduler",
    "EventRecorder",
    "EventTarget",
    "HeadersContainer",
    "HttpResponse",
    "InvalidStateError",
    "ManualScheduler",
    "MockUsageError",
    "MockXhr",
    "MockXhrError",
    "NetworkErrorResponse",
    "NotSupportedError",
    "ProgressEvent",
    "ReadyState",
    "SecurityError",
    "XhrSyntaxError",
    "new_mock_xhr",
    "record_events",
]
