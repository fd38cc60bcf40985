"""Render scenario results as JSON, Markdown or a rich console table."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from rich.table import Table

from . import __version__
from .core import ReadyState
from .scenario import ScenarioResult

LOGGER = logging.getLogger(__name__)

FORMATS = ("json", "markdown", "table")


def _state_name(value: int) -> str:
    try:
        return ReadyState(value).name
    except ValueError:
        return str(value)


def render_json(result: ScenarioResult) -> str:
    """Return a canonical JSON representation of the scenario result."""

    payload: dict[str, Any] = result.as_dict()
    payload["version"] = __version__
    return json.dumps(payload, indent=2, sort_keys=True)


def render_markdown(result: ScenarioResult) -> str:
    """Render the scenario result in Markdown format."""

    lines: list[str] = [
        f"# mockxhr scenario: {result.name}",
        "",
        f"*Outcome:* {'completed' if result.ok else 'stopped'}",
        f"*Steps run:* {result.steps_run}",
        f"*Ready state:* {_state_name(result.ready_state)} ({result.ready_state})",
        f"*Status:* {result.status} {result.status_text}".rstrip(),
        "",
    ]
    if result.error:
        lines.extend(["## Error", "", f"`{result.error}`", ""])

    lines.append("## Events")
    if result.events:
        lines.extend(f"{index}. `{event}`" for index, event in enumerate(result.events, start=1))
    else:
        lines.append("No events fired.")

    lines.append("")
    lines.append("## Response")
    headers = result.response_headers.strip()
    if headers:
        lines.append("```text")
        lines.extend(headers.splitlines())
        lines.append("```")
    else:
        lines.append("No response headers.")
    if result.response_text:
        lines.append("")
        lines.append("```text")
        lines.extend(result.response_text.splitlines())
        lines.append("```")

    return "\n".join(lines) + "\n"


def render_table(result: ScenarioResult) -> Table:
    """Build a rich table listing the recorded events in order."""

    table = Table(title=f"{result.name} ({_state_name(result.ready_state)}, status {result.status})")
    table.add_column("#", justify="right")
    table.add_column("Channel")
    table.add_column("Event")
    for index, entry in enumerate(result.events, start=1):
        if entry.startswith("upload."):
            table.add_row(str(index), "upload", entry[len("upload."):])
        else:
            table.add_row(str(index), "main", entry)
    if result.error:
        table.caption = result.error
    return table


def write_report(result: ScenarioResult, outfile: Path, format: str) -> tuple[Path, str]:
    """Write ``result`` to ``outfile`` using ``format`` and return the resulting path."""

    if not isinstance(outfile, Path):
        outfile = Path(outfile)

    normalized_format = format.lower()

    if normalized_format == "json":
        outfile.parent.mkdir(parents=True, exist_ok=True)
        outfile.write_text(render_json(result), encoding="utf-8")
        return outfile.resolve(), "json"

    if normalized_format in {"markdown", "md"}:
        outfile.parent.mkdir(parents=True, exist_ok=True)
        outfile.write_text(render_markdown(result), encoding="utf-8")
        return outfile.resolve(), "markdown"

    raise ValueError(f"Unsupported report format: {format}")


__all__ = ["FORMATS", "render_json", "render_markdown", "render_table", "write_report"]
