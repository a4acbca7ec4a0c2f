"""Compiler driver that negotiates with an in-process host or runs the command-line tool."""

from .diagnostics import DiagnosticLine, DiagnosticReconstructor, parse_canonical_line
from .host import ExecutionStrategySelector, HostCompiler, StrategyOutcome
from .options import CompileOptions, Reference
from .task import CompileResult, VbcTask

__all__ = [
    "CompileOptions",
    "CompileResult",
    "DiagnosticLine",
    "DiagnosticReconstructor",
    "ExecutionStrategySelector",
    "HostCompiler",
    "Reference",
    "StrategyOutcome",
    "VbcTask",
    "parse_canonical_line",
]
