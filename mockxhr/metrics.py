"""Prometheus counters for simulated request outcomes."""

from __future__ import annotations

import logging

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, generate_latest

LOGGER = logging.getLogger(__name__)

OUTCOMES = ("load", "error", "timeout", "abort")

_REGISTRY = CollectorRegistry()
_ENABLED = True

REQUESTS_SENT = Counter(
    "mockxhr_requests_sent",
    "Number of send() calls accepted by mock request objects.",
    registry=_REGISTRY,
)
REQUESTS_FINISHED = Counter(
    "mockxhr_requests_finished",
    "Number of mock requests that reached DONE, grouped by outcome.",
    labelnames=["outcome"],
    registry=_REGISTRY,
)


def set_enabled(enabled: bool) -> None:
    global _ENABLED
    _ENABLED = enabled


def record_send(method: str | None, url: str | None) -> None:
    """Count an accepted ``send()``."""

    if not _ENABLED:
        return
    LOGGER.debug("metrics.request_sent", extra={"event": "xhr.metrics.sent", "method": method, "url": url})
    REQUESTS_SENT.inc()


def record_outcome(outcome: str) -> None:
    """Count a request reaching DONE through ``load`` or one of the error events."""

    if not _ENABLED:
        return
    if outcome not in OUTCOMES:
        raise ValueError(f"Outcome must be one of {OUTCOMES}")
    REQUESTS_FINISHED.labels(outcome=outcome).inc()


def sample(name: str, labels: dict[str, str] | None = None) -> float:
    value = _REGISTRY.get_sample_value(name, labels or {})
    return value or 0.0


def metrics_payload() -> tuple[bytes, str]:
    """Return the Prometheus exposition payload and its content type."""

    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


__all__ = [
    "OUTCOMES",
    "metrics_payload",
    "record_outcome",
    "record_send",
    "sample",
    "set_enabled",
]
