"""Launching the command-line compiler."""

from __future__ import annotations

import locale
import logging
import shutil
import subprocess
import time
from dataclasses import dataclass

LOGGER = logging.getLogger(__name__)

DEFAULT_TOOL_NAMES = ("vbc", "vbc.exe", "vbnc")


@dataclass(slots=True)
class ToolResult:
    """Result of one external compiler run."""

    executable: str
    arguments: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False
    duration_seconds: float = 0.0
    executed: bool = True

    @property
    def output_lines(self) -> list[str]:
        """Standard output then standard error, one entry per line."""
        lines = self.stdout.splitlines()
        lines.extend(self.stderr.splitlines())
        return lines


class ToolRunner:
    """Runs the compiler executable and normalizes what it returns."""

    def __init__(self, tool_path: str | None = None, *, tool_name: str | None = None) -> None:
        self.tool_path = tool_path
        self.tool_name = tool_name

    @property
    def executable(self) -> str:
        if self.tool_path:
            return self.tool_path
        return _default_executable(self.tool_name)

    def run(
        self,
        arguments: list[str],
        *,
        cwd: str | None = None,
        timeout: float | None = None,
    ) -> ToolResult:
        executable = self.executable
        LOGGER.info(
            "tool_request",
            extra={"executable": executable, "argument_count": len(arguments), "timeout": timeout},
        )
        started = time.monotonic()
        try:
            process = subprocess.run(
                [executable, *arguments],
                capture_output=True,
                cwd=cwd,
                timeout=timeout,
                check=False,
                text=False,
            )
            result = ToolResult(
                executable=executable,
                arguments=arguments,
                returncode=process.returncode,
                stdout=_normalize_output(process.stdout),
                stderr=_normalize_output(process.stderr),
                duration_seconds=time.monotonic() - started,
            )
        except subprocess.TimeoutExpired as exc:
            result = ToolResult(
                executable=executable,
                arguments=arguments,
                returncode=124,
                stdout=_normalize_output(exc.stdout),
                stderr=_normalize_output(exc.stderr),
                timed_out=True,
                duration_seconds=time.monotonic() - started,
            )
        except FileNotFoundError:
            result = ToolResult(
                executable=executable,
                arguments=arguments,
                returncode=127,
                stdout="",
                stderr="",
                executed=False,
                duration_seconds=time.monotonic() - started,
            )

        LOGGER.info(
            "tool_result",
            extra={
                "executable": executable,
                "returncode": result.returncode,
                "timed_out": result.timed_out,
                "executed": result.executed,
                "duration_seconds": round(result.duration_seconds, 4),
                "stdout_length": len(result.stdout),
                "stderr_length": len(result.stderr),
            },
        )
        return result


def _default_executable(tool_name: str | None) -> str:
    candidates = (tool_name,) if tool_name else DEFAULT_TOOL_NAMES
    for candidate in candidates:
        if shutil.which(candidate):
            return candidate
    return candidates[0]


def _normalize_output(payload: bytes | str | None) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload

    for encoding in ("utf-8", "utf-8-sig", "utf-16", locale.getpreferredencoding(False), "cp1252"):
        try:
            return payload.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            continue
    return payload.decode("utf-8", errors="replace")
