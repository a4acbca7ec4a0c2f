"""Exception types and user-facing failure messages."""

from __future__ import annotations


class VbcDriverError(Exception):
    """Base class for errors raised by vbcdriver."""


class InvalidParameterError(VbcDriverError, ValueError):
    """A compile option holds a value the compiler cannot accept."""

    def __init__(self, parameter: str, value: object, detail: str | None = None) -> None:
        self.parameter = parameter
        self.value = value
        message = format_message("invalid_parameter", parameter, value)
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class CriticalHostError(VbcDriverError):
    """Unrecoverable host fault; negotiation is meaningless after it."""


MESSAGES = {
    "invalid_parameter": 'The "{0}" parameter has an invalid value "{1}".',
    "missing_output_assembly": "No output assembly was specified for the given sources.",
    "could_not_set_host_parameter": 'The host compiler rejected the "{0}" parameter. {1}',
    "host_session_failed": "The host compiler session failed. {0}",
    "reference_not_found": 'Could not find the referenced file "{0}".',
    "tool_not_found": 'Could not locate the compiler executable "{0}".',
    "tool_timed_out": "The compiler did not finish within {0} seconds.",
    "tool_exited": "The compiler exited with code {0}.",
    "rename_pdb_failed": 'Unable to move the PDB file to "{0}". {1}',
}


def format_message(key: str, *args: object) -> str:
    return MESSAGES[key].format(*args)


def is_critical_exception(exc: BaseException) -> bool:
    """Return true when ``exc`` must never be absorbed into a result value."""
    if not isinstance(exc, Exception):
        return True
    return isinstance(exc, (CriticalHostError, MemoryError, RecursionError))
