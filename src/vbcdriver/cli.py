"""Command-line interface for vbcdriver."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO, cast

from .config import DriverConfig
from .diagnostics import NOT_SPECIFIED, DiagnosticLine, DiagnosticReconstructor
from .errors import InvalidParameterError
from .log import LoggedEvent, TaskLog
from .options import CompileOptions
from .task import VbcTask
from .tool import ToolRunner

LOGGER = logging.getLogger(__name__)


class CLIArgs(argparse.Namespace):
    command: str
    options_file: str
    working_directory: str | None
    dry_run: bool
    input_file: str | None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vbcdriver", description="Visual Basic compiler driver"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Compile using options from a JSON file")
    build.add_argument("options_file", help="JSON file holding the compile options")
    build.add_argument(
        "--cwd",
        dest="working_directory",
        help=(
            "Directory the compiler runs in. "
            "Takes precedence over config/env cwd values."
        ),
    )
    build.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the compiler command line without running it",
    )

    normalize = subparsers.add_parser(
        "normalize", help="Rewrite raw compiler output into single-line diagnostics"
    )
    normalize.add_argument(
        "input_file", nargs="?", help="File with compiler output (default: stdin)"
    )
    return parser


def main() -> int:
    parser = build_parser()
    args = cast(CLIArgs, parser.parse_args())
    if args.command == "normalize":
        return _normalize(args.input_file)
    return _build(args)


def _build(args: CLIArgs) -> int:
    config = DriverConfig.from_env()
    try:
        options = _load_options(args.options_file)
    except (OSError, json.JSONDecodeError, InvalidParameterError, TypeError) as exc:
        print(f"Invalid options file {args.options_file}: {exc}")
        return 1

    configured_working_directory = (
        args.working_directory if args.working_directory is not None else config.working_directory
    )
    working_directory: str | None = None
    if configured_working_directory is not None:
        resolved_working_directory = Path(configured_working_directory).expanduser().resolve()
        if not resolved_working_directory.exists() or not resolved_working_directory.is_dir():
            print(f"Invalid configured cwd directory: {configured_working_directory}")
            return 1
        working_directory = str(resolved_working_directory)

    task = VbcTask(
        options,
        log=TaskLog(log_dir=config.log_dir),
        runner=ToolRunner(config.tool_path, tool_name=config.tool_name),
        use_host_compiler_if_available=config.use_host_compiler_if_available,
        force_external_tool=config.force_external_tool,
        working_directory=working_directory,
        timeout=config.timeout,
    )

    if args.dry_run:
        print(" ".join([task.runner.executable, *task.command_line()]))
        return 0

    result = task.execute()
    for event in result.events:
        print(_render_event(event))
    LOGGER.debug("build_finished", extra={"success": result.success})
    return 0 if result.success else 1


def _normalize(input_file: str | None) -> int:
    reconstructor = DiagnosticReconstructor()
    if input_file is None:
        for line in reconstructor.reconstruct(_read_lines(sys.stdin)):
            print(line.text)
        return 0

    try:
        with open(input_file, encoding="utf-8", errors="replace") as handle:
            for line in reconstructor.reconstruct(_read_lines(handle)):
                print(line.text)
    except OSError as exc:
        print(f"Unable to read {input_file}: {exc}")
        return 1
    return 0


def _read_lines(handle: TextIO) -> Iterator[DiagnosticLine]:
    for raw in handle:
        yield DiagnosticLine(text=raw.rstrip("\r\n"))


def _load_options(path_value: str) -> CompileOptions:
    with Path(path_value).open("r", encoding="utf-8") as fh:
        parsed = json.load(fh)
    if not isinstance(parsed, dict):
        raise InvalidParameterError("options", type(parsed).__name__, "Expected a JSON object.")
    return CompileOptions.from_dict(parsed)


def _render_event(event: LoggedEvent) -> str:
    if event.kind == "message":
        return event.text

    location = ""
    if event.line != NOT_SPECIFIED:
        location = f"({event.line}" + (
            f",{event.column})" if event.column != NOT_SPECIFIED else ")"
        )
    prefix = f"{event.origin}{location}: " if event.origin else ""
    code = f" {event.code}" if event.code else ""
    return f"{prefix}{event.kind}{code}: {event.text}"


if __name__ == "__main__":
    raise SystemExit(main())
