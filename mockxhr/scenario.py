"""Replay declarative request/response scenarios against a mock request object.

A scenario is a JSON document::

    {
      "name": "upload with default response",
      "steps": [
        {"op": "open", "method": "POST", "url": "/upload"},
        {"op": "send", "body": "body"},
        {"op": "run_pending"}
      ],
      "on_send": [
        {"op": "respond", "status": 201, "body": "created"}
      ]
    }

``steps`` run in order on a fresh instance. ``on_send`` steps, when present,
run from the on-send hook, i.e. when a ``run_pending`` step drains the
scheduler after a ``send``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from .core import MockXhr, new_mock_xhr
from .exceptions import MockXhrError, ScenarioError
from .recorder import EventRecorder
from .scheduling import ManualScheduler

LOGGER = logging.getLogger(__name__)

REQUEST_OPS = ("open", "set_request_header", "send", "abort")
MOCK_OPS = (
    "upload_progress",
    "set_response_headers",
    "download_progress",
    "set_response_body",
    "respond",
    "set_network_error",
    "set_request_timeout",
)
SCHEDULER_OPS = ("run_pending",)
SUPPORTED_OPS = REQUEST_OPS + MOCK_OPS + SCHEDULER_OPS


@dataclass(frozen=True)
class Step:
    op: str
    arguments: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: object) -> "Step":
        if not isinstance(data, Mapping):
            raise ScenarioError("Each scenario step must be an object.")
        op = data.get("op")
        if op not in SUPPORTED_OPS:
            raise ScenarioError(f"Unknown scenario operation {op!r}; expected one of {sorted(SUPPORTED_OPS)}")
        arguments = {key: value for key, value in data.items() if key != "op"}
        return cls(op=op, arguments=arguments)

    def describe(self) -> str:
        args = ", ".join(f"{key}={value!r}" for key, value in self.arguments.items())
        return f"{self.op}({args})"


@dataclass(frozen=True)
class Scenario:
    name: str
    steps: tuple[Step, ...]
    on_send: tuple[Step, ...] = ()

    @classmethod
    def from_dict(cls, data: object) -> "Scenario":
        if not isinstance(data, Mapping):
            raise ScenarioError("A scenario must be a JSON object.")
        steps = data.get("steps")
        if not isinstance(steps, Sequence) or isinstance(steps, str) or not steps:
            raise ScenarioError("A scenario needs a non-empty 'steps' list.")
        on_send = data.get("on_send") or []
        if not isinstance(on_send, Sequence) or isinstance(on_send, str):
            raise ScenarioError("'on_send' must be a list of steps.")
        return cls(
            name=str(data.get("name") or "scenario"),
            steps=tuple(Step.from_dict(item) for item in steps),
            on_send=tuple(Step.from_dict(item) for item in on_send),
        )


@dataclass
class ScenarioResult:
    name: str
    events: list[str]
    ready_state: int
    status: int
    status_text: str
    response_text: str
    response_headers: str
    steps_run: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "ok": self.ok,
            "error": self.error,
            "steps_run": self.steps_run,
            "ready_state": self.ready_state,
            "status": self.status,
            "status_text": self.status_text,
            "response_text": self.response_text,
            "response_headers": self.response_headers,
            "events": list(self.events),
        }


def load_scenario(path: Path | str) -> Scenario:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ScenarioError(f"Unable to read scenario file {path}: {exc}") from exc
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ScenarioError(f"Scenario file {path} is not valid JSON: {exc}") from exc
    return Scenario.from_dict(data)


def _apply(xhr: MockXhr, scheduler: ManualScheduler, step: Step) -> None:
    LOGGER.debug("scenario.step", extra={"event": "scenario.step", "step": step.describe()})
    if step.op == "run_pending":
        scheduler.run_pending()
        return
    operation: Callable[..., Any] = getattr(xhr, step.op)
    try:
        operation(**step.arguments)
    except TypeError as exc:
        raise ScenarioError(f"Invalid arguments for {step.describe()}: {exc}") from exc


def run_scenario(scenario: Scenario) -> ScenarioResult:
    """Execute ``scenario`` on a fresh mock request object and record its events.

    Errors raised by the mock (wrong state, forbidden method, misuse of the
    mock response methods) stop the run and are reported on the result.
    """

    scheduler = ManualScheduler()

    def on_send(xhr: MockXhr) -> None:
        for step in scenario.on_send:
            _apply(xhr, scheduler, step)

    xhr_class = new_mock_xhr(on_send=on_send if scenario.on_send else None, scheduler=scheduler)
    xhr = xhr_class()
    recorder = EventRecorder(xhr)

    steps_run = 0
    error: Optional[str] = None
    try:
        for step in scenario.steps:
            _apply(xhr, scheduler, step)
            steps_run += 1
    except ScenarioError:
        raise
    except MockXhrError as exc:
        error = f"{type(exc).__name__}: {exc}"
        LOGGER.warning(
            "Scenario %s stopped at step %d: %s",
            scenario.name,
            steps_run + 1,
            error,
            extra={"event": "scenario.failed", "scenario": scenario.name},
        )

    response_text = xhr.response_text
    return ScenarioResult(
        name=scenario.name,
        events=list(recorder.events),
        ready_state=int(xhr.ready_state),
        status=xhr.status,
        status_text=xhr.status_text,
        response_text=response_text if isinstance(response_text, str) else repr(response_text),
        response_headers=xhr.get_all_response_headers(),
        steps_run=steps_run,
        error=error,
    )


__all__ = [
    "SUPPORTED_OPS",
    "Scenario",
    "ScenarioResult",
    "Step",
    "load_scenario",
    "run_scenario",
]
