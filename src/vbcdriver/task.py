"""Compile orchestration: pick a strategy, run it, and report diagnostics."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .artifacts import move_pdb_file_if_necessary
from .command_line import build_command_line
from .diagnostics import DiagnosticLine, DiagnosticReconstructor, Importance
from .errors import InvalidParameterError, format_message
from .host import (
    ExecutionStrategySelector,
    HostCompiler,
    HostParameter,
    StrategyDecision,
    StrategyOutcome,
    compile_with_host,
)
from .host.selector import ExistsCheck
from .log import LoggedEvent, TaskLog
from .options import CompileOptions
from .tool import ToolResult, ToolRunner

LOGGER = logging.getLogger(__name__)

# 'error' and 'warning' are not localized in compiler output.
_DIAGNOSTIC_MARKERS = ("error", "warning")


@dataclass(slots=True)
class CompileResult:
    """What one compile request produced."""

    success: bool
    outcome: StrategyOutcome | None
    used_command_line_tool: bool
    events: list[LoggedEvent]
    tool_result: ToolResult | None = None
    pdb_path: Path | None = None


class VbcTask:
    """Drives one compile through the host compiler or the command-line tool."""

    def __init__(
        self,
        options: CompileOptions,
        *,
        host: HostCompiler | None = None,
        log: TaskLog | None = None,
        runner: ToolRunner | None = None,
        use_host_compiler_if_available: bool = False,
        force_external_tool: bool = False,
        working_directory: str | None = None,
        timeout: float | None = None,
        parameters: Sequence[HostParameter] | None = None,
        exists: ExistsCheck = os.path.exists,
    ) -> None:
        self.options = options
        self.host = host
        self.log = log or TaskLog()
        self.runner = runner or ToolRunner()
        self.use_host_compiler_if_available = use_host_compiler_if_available
        self.force_external_tool = force_external_tool
        self.working_directory = working_directory
        self.timeout = timeout
        self.parameters = parameters
        self.exists = exists
        self.reconstructor = DiagnosticReconstructor(parser=self.log.parser)
        self.used_command_line_tool = False

    def execute(self) -> CompileResult:
        try:
            self.options.validate()
        except InvalidParameterError as exc:
            self.log.log_error(str(exc))
            return self._result(False, None)

        decision = self.select_strategy()
        self.used_command_line_tool = decision.uses_external_tool
        tool_result: ToolResult | None = None

        outcome = decision.outcome
        if outcome is StrategyOutcome.DONE_SUCCESS:
            return self._result(True, outcome)
        if outcome is StrategyOutcome.DONE_FAILURE:
            return self._result(False, outcome)
        if outcome is StrategyOutcome.USE_HOST:
            if self.host is None:
                raise RuntimeError("host strategy selected without a host compiler")
            compiled = compile_with_host(self.host)
        elif outcome is StrategyOutcome.USE_EXTERNAL_TOOL:
            tool_result = self.run_external_tool()
            compiled = tool_result.returncode == 0 and not tool_result.timed_out
        else:
            raise AssertionError(f"unhandled strategy outcome: {outcome}")

        if not compiled:
            return self._result(False, outcome, tool_result)

        pdb_path = move_pdb_file_if_necessary(
            self.options.pdb_file, self.options.output_assembly, self.log
        )
        return self._result(not self.log.has_logged_errors, outcome, tool_result, pdb_path)

    def select_strategy(self) -> StrategyDecision:
        selector = ExecutionStrategySelector(
            self.host,
            self.options,
            self.log,
            use_host_compiler_if_available=self.use_host_compiler_if_available,
            force_external_tool=self.force_external_tool,
            parameters=self.parameters,
            exists=self.exists,
        )
        return selector.select()

    def command_line(self) -> list[str]:
        design_time = self.host is not None and self.host.is_design_time()
        return build_command_line(self.options, design_time=design_time)

    def run_external_tool(self) -> ToolResult:
        self.reconstructor.reset()
        result = self.runner.run(
            self.command_line(), cwd=self.working_directory, timeout=self.timeout
        )
        for text in result.output_lines:
            self.log_events_from_text_output(text)
        for line in self.reconstructor.finish():
            self.log.log_line(line)

        if not result.executed:
            self.log.log_error(format_message("tool_not_found", result.executable))
        elif result.timed_out:
            self.log.log_error(format_message("tool_timed_out", self.timeout))
        elif result.returncode != 0 and not self.log.has_logged_errors:
            self.log.log_error(format_message("tool_exited", result.returncode))
        return result

    def log_events_from_text_output(self, text: str, importance: Importance = "normal") -> None:
        """Route one line of compiler output to the log.

        Only output from the command-line tool goes through the reconstructor,
        and while no diagnostic is in flight only lines that could start one.
        """
        if not self.used_command_line_tool:
            self.log.log_text(text, importance)
            return
        lowered = text.lower()
        if self.reconstructor.idle and not any(marker in lowered for marker in _DIAGNOSTIC_MARKERS):
            self.log.log_text(text, importance)
            return
        for line in self.reconstructor.feed(DiagnosticLine(text=text, importance=importance)):
            self.log.log_line(line)

    def _result(
        self,
        success: bool,
        outcome: StrategyOutcome | None,
        tool_result: ToolResult | None = None,
        pdb_path: Path | None = None,
    ) -> CompileResult:
        LOGGER.info(
            "compile_finished",
            extra={
                "success": success,
                "outcome": outcome.value if outcome else None,
                "used_command_line_tool": self.used_command_line_tool,
                "errors": len(self.log.errors),
                "warnings": len(self.log.warnings),
            },
        )
        return CompileResult(
            success=success,
            outcome=outcome,
            used_command_line_tool=self.used_command_line_tool,
            events=list(self.log.events),
            tool_result=tool_result,
            pdb_path=pdb_path,
        )
