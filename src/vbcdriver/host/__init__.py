"""Host compiler negotiation."""

from .base import FreeThreadedHost, HostCompiler, compile_with_host
from .parameters import HostParameter, build_host_parameters
from .selector import (
    ExecutionStrategySelector,
    Negotiation,
    ParameterResult,
    ParameterStatus,
    StrategyDecision,
    StrategyOutcome,
)

__all__ = [
    "ExecutionStrategySelector",
    "FreeThreadedHost",
    "HostCompiler",
    "HostParameter",
    "Negotiation",
    "ParameterResult",
    "ParameterStatus",
    "StrategyDecision",
    "StrategyOutcome",
    "build_host_parameters",
    "compile_with_host",
]
