"""In-process host compiler endpoint."""

from __future__ import annotations

import abc


class HostCompiler(abc.ABC):
    """Abstract endpoint for a compiler running inside the calling process.

    Besides the session methods below, a host exposes one
    ``set_<option>(...) -> bool`` method per compile option it understands,
    returning false when it cannot honor the requested value. A host without
    a given setter can only accept that option at its default. Setters may
    raise for values they recognize but reject; ``end_initialization`` may
    raise for a bad combination discovered late.
    """

    @abc.abstractmethod
    def begin_initialization(self) -> None:
        """Open a parameter negotiation session."""

    @abc.abstractmethod
    def end_initialization(self) -> None:
        """Close the negotiation session."""

    @abc.abstractmethod
    def is_design_time(self) -> bool:
        """Return true when the host only wants editor feedback, not outputs."""

    @abc.abstractmethod
    def is_up_to_date(self) -> bool:
        """Return true when the host's outputs already reflect its inputs."""

    @abc.abstractmethod
    def compile(self) -> bool:
        """Compile synchronously and return whether it succeeded."""


class FreeThreadedHost(abc.ABC):
    """Compile entry point that waits on the caller's thread instead of a UI thread."""

    @abc.abstractmethod
    def compile(self) -> bool:
        """Compile synchronously and return whether it succeeded."""


def compile_with_host(host: HostCompiler) -> bool:
    """Run a host compile, preferring the free-threaded entry point when offered."""
    get_free_threaded = getattr(host, "get_free_threaded_host", None)
    if callable(get_free_threaded):
        free_threaded: FreeThreadedHost = get_free_threaded()
        return bool(free_threaded.compile())
    return bool(host.compile())
