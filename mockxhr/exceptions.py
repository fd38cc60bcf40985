"""Error kinds raised by the mock request object."""

from __future__ import annotations


class MockXhrError(Exception):
    """Base class for every error raised by mockxhr."""


class InvalidStateError(MockXhrError):
    """Raised when a request operation is called in the wrong ready state."""


class SecurityError(MockXhrError):
    """Raised when ``open()`` is given a forbidden method."""


class XhrSyntaxError(MockXhrError, ValueError):
    """Raised when header names or values are not text."""


class NotSupportedError(MockXhrError):
    """Raised when writing an attribute the mock does not support."""


class MockUsageError(MockXhrError, RuntimeError):
    """Raised when a mock-control method is called in a state that makes no sense."""

    def __init__(self, message: str = "Mock usage error detected.") -> None:
        super().__init__(message)


class ScenarioError(MockXhrError, ValueError):
    """Raised when a scenario document cannot be executed."""


__all__ = [
    "InvalidStateError",
    "MockUsageError",
    "MockXhrError",
    "NotSupportedError",
    "ScenarioError",
    "SecurityError",
    "XhrSyntaxError",
]
