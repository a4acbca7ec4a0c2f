"""Choose between the in-process host compiler and the external tool."""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..errors import format_message, is_critical_exception
from ..log import TaskLog
from ..options import CompileOptions
from .base import HostCompiler
from .parameters import HostParameter, build_host_parameters

LOGGER = logging.getLogger(__name__)

ExistsCheck = Callable[[str], bool]


class StrategyOutcome(enum.Enum):
    """What the caller should do next with a compile request."""

    USE_HOST = "use_host"
    USE_EXTERNAL_TOOL = "use_external_tool"
    DONE_SUCCESS = "done_success"
    DONE_FAILURE = "done_failure"


class ParameterStatus(enum.Enum):
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
    REJECTED = "rejected"


@dataclass(slots=True, frozen=True)
class ParameterResult:
    """How the host answered for one option."""

    name: str
    status: ParameterStatus
    detail: str | None = None


@dataclass(slots=True)
class Negotiation:
    """Everything learned from one negotiation session with a host."""

    results: list[ParameterResult] = field(default_factory=list)
    begin_error: str | None = None
    end_error: str | None = None

    @property
    def rejected(self) -> list[ParameterResult]:
        return [item for item in self.results if item.status is ParameterStatus.REJECTED]

    @property
    def unsupported(self) -> list[ParameterResult]:
        return [item for item in self.results if item.status is not ParameterStatus.SUPPORTED]

    @property
    def covers_all_parameters(self) -> bool:
        return not self.unsupported

    @property
    def session_failed(self) -> bool:
        return self.begin_error is not None or self.end_error is not None

    @property
    def succeeded(self) -> bool:
        return not self.session_failed and not self.rejected


@dataclass(slots=True, frozen=True)
class StrategyDecision:
    outcome: StrategyOutcome
    negotiation: Negotiation | None = None
    missing_references: tuple[str, ...] = ()

    @property
    def uses_external_tool(self) -> bool:
        return self.outcome is StrategyOutcome.USE_EXTERNAL_TOOL


class ExecutionStrategySelector:
    """Runs the host negotiation protocol once for one compile request.

    ``use_host_compiler_if_available`` seeds the coverage flag: when false the
    host is still configured (design-time hosts need it) but a build-time
    request always falls back to the external tool. ``force_external_tool``
    applies the same fallback after negotiation.
    """

    def __init__(
        self,
        host: HostCompiler | None,
        options: CompileOptions,
        log: TaskLog,
        *,
        use_host_compiler_if_available: bool = True,
        force_external_tool: bool = False,
        parameters: Sequence[HostParameter] | None = None,
        exists: ExistsCheck = os.path.exists,
    ) -> None:
        self.host = host
        self.options = options
        self.log = log
        self.use_host_compiler_if_available = use_host_compiler_if_available
        self.force_external_tool = force_external_tool
        self.parameters = tuple(parameters) if parameters is not None else build_host_parameters()
        self.exists = exists
        self._selected = False

    def select(self) -> StrategyDecision:
        if self._selected:
            raise RuntimeError("strategy selection already ran for this compile request")
        self._selected = True

        decision = self._select()
        LOGGER.info(
            "strategy_selected",
            extra={
                "outcome": decision.outcome.value,
                "host_attached": self.host is not None,
                "missing_references": len(decision.missing_references),
            },
        )
        return decision

    def _select(self) -> StrategyDecision:
        host = self.host
        if host is None:
            return StrategyDecision(StrategyOutcome.USE_EXTERNAL_TOOL)

        negotiation = self._negotiate(host)
        if negotiation.session_failed and not negotiation.rejected:
            return self._failed(negotiation)

        if host.is_design_time():
            # Host is configured for editor feedback; nothing to compile.
            if negotiation.succeeded:
                return StrategyDecision(StrategyOutcome.DONE_SUCCESS, negotiation)
            return self._failed(negotiation)

        covered = self.use_host_compiler_if_available and negotiation.covers_all_parameters
        if not covered or self.force_external_tool:
            missing = self.missing_references()
            if missing:
                return StrategyDecision(StrategyOutcome.DONE_FAILURE, negotiation, missing)
            return StrategyDecision(StrategyOutcome.USE_EXTERNAL_TOOL, negotiation)

        if not negotiation.succeeded:
            return self._failed(negotiation)
        if host.is_up_to_date():
            return StrategyDecision(StrategyOutcome.DONE_SUCCESS, negotiation)
        return StrategyDecision(StrategyOutcome.USE_HOST, negotiation)

    def _negotiate(self, host: HostCompiler) -> Negotiation:
        """Offer every parameter to ``host`` inside one initialization session."""
        negotiation = Negotiation()
        try:
            negotiation.begin_error = self._begin(host)
            if negotiation.begin_error is None:
                for parameter in self.parameters:
                    result = self._offer(host, parameter)
                    if result is not None:
                        negotiation.results.append(result)
        finally:
            negotiation.end_error = self._end(host)

        for result in negotiation.unsupported:
            LOGGER.debug(
                "host_parameter_declined",
                extra={"parameter": result.name, "status": result.status.value},
            )
        return negotiation

    def missing_references(self) -> tuple[str, ...]:
        """Log and return referenced files that do not exist on disk."""
        missing: list[str] = []
        for reference in self.options.references or ():
            if not self.exists(reference.path):
                self.log.log_error(format_message("reference_not_found", reference.path))
                missing.append(reference.path)
        return tuple(missing)

    def _offer(self, host: HostCompiler, parameter: HostParameter) -> ParameterResult | None:
        try:
            accepted = parameter.setter(host, self.options)
        except Exception as exc:
            if is_critical_exception(exc):
                raise
            LOGGER.warning(
                "host_parameter_rejected",
                extra={"parameter": parameter.name, "error": str(exc)},
            )
            return ParameterResult(
                parameter.name,
                ParameterStatus.REJECTED,
                format_message("could_not_set_host_parameter", parameter.name, exc),
            )
        if accepted is None:
            return None
        status = ParameterStatus.SUPPORTED if accepted else ParameterStatus.UNSUPPORTED
        return ParameterResult(parameter.name, status)

    def _failed(self, negotiation: Negotiation) -> StrategyDecision:
        for message in (negotiation.begin_error, negotiation.end_error):
            if message is not None:
                self.log.log_error(format_message("host_session_failed", message))
        for result in negotiation.rejected:
            self.log.log_error(result.detail or result.name)
        return StrategyDecision(StrategyOutcome.DONE_FAILURE, negotiation)

    @staticmethod
    def _begin(host: HostCompiler) -> str | None:
        try:
            host.begin_initialization()
        except Exception as exc:
            if is_critical_exception(exc):
                raise
            return str(exc)
        return None

    @staticmethod
    def _end(host: HostCompiler) -> str | None:
        try:
            host.end_initialization()
        except Exception as exc:
            if is_critical_exception(exc):
                raise
            return str(exc)
        return None
