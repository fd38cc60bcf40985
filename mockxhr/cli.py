"""Command-line interface for replaying mockxhr scenarios."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console

from . import __version__, metrics
from .config import Settings, load_environment
from .exceptions import ScenarioError
from .logging_utils import configure_logging
from .reporters import FORMATS, render_json, render_markdown, render_table, write_report
from .scenario import load_scenario, run_scenario


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mockxhr",
        description="Replay a request/response scenario against the XMLHttpRequest mock and print its event trace.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("scenario", type=Path, help="Path to a scenario JSON file")
    parser.add_argument("--format", choices=FORMATS, default="table", help="Output format for the trace")
    parser.add_argument(
        "--outfile",
        type=Path,
        help="Write the trace to this path (Markdown with --format markdown, JSON otherwise)",
    )
    parser.add_argument("--log-json", action="store_true", default=None, help="Emit structured JSON logs to the log file")
    parser.add_argument("--log-file", type=Path, help="Write logs to the specified path")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Only log errors")
    return parser


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(list(argv) if argv is not None else None)


def configure_cli_logging(args: argparse.Namespace, settings: Settings) -> None:
    level = settings.log_level
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    json_logs = settings.log_json if args.log_json is None else args.log_json
    configure_logging(level=level, json_logs=json_logs, logfile=args.log_file or settings.log_file)


def main(argv: Optional[Iterable[str]] = None) -> int:
    load_environment()
    args = parse_args(argv)
    settings = Settings.from_env()

    configure_cli_logging(args, settings)
    metrics.set_enabled(settings.metrics_enabled)
    logger = logging.getLogger("mockxhr.cli")
    console = Console()

    try:
        scenario = load_scenario(args.scenario)
        result = run_scenario(scenario)
    except ScenarioError as exc:
        logger.error("Invalid scenario: %s", exc)
        return 1

    if args.outfile:
        output_format = "markdown" if args.format == "markdown" else "json"
        written, _ = write_report(result, args.outfile, output_format)
        logger.info("Trace written to %s", written)
    elif args.format == "json":
        console.print(render_json(result), markup=False, highlight=False)
    elif args.format == "markdown":
        console.print(render_markdown(result), markup=False, highlight=False)
    else:
        console.print(render_table(result))

    if not result.ok:
        logger.error("Scenario %s stopped: %s", result.name, result.error)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
