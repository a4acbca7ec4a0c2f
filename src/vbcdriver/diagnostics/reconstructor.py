"""Rebuild column-accurate diagnostics from the compiler's multi-line blocks.

When the command-line compiler reports an error or warning against a token it
prints a block like::

    Module1.vb(10): error BC30451: 'y' is not declared.

        Dim x As Integer = y
                           ~

The header carries the line but no column. The reconstructor buffers the block
and rewrites the header to ``Module1.vb(10,28): error BC30451: ...`` so that
consumers see the same single-line form the host compiler would produce. The
remaining lines of the block are emitted unchanged after it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Literal

from .canonical import CanonicalParts, parse_canonical_line

LOGGER = logging.getLogger(__name__)

Importance = Literal["high", "normal", "low"]
LineParser = Callable[[str], CanonicalParts | None]

# blank separator, source text, caret line
LINES_AFTER_BODY = 3
CARET = "~"
LOCATION_END = ")"


@dataclass(slots=True, frozen=True)
class DiagnosticLine:
    """One line of compiler output and the importance it arrived with."""

    text: str
    importance: Importance = "normal"


@dataclass(slots=True)
class Idle:
    """No diagnostic in flight."""


@dataclass(slots=True)
class BufferingBody:
    """Header seen; collecting message lines until the blank separator."""

    lines: list[DiagnosticLine] = field(default_factory=list)


@dataclass(slots=True)
class BodyClosed:
    """Blank separator seen; waiting for the source and caret lines."""

    lines: list[DiagnosticLine]
    body_line_count: int

    @property
    def complete(self) -> bool:
        return len(self.lines) == self.body_line_count + LINES_AFTER_BODY


ReconstructorState = Idle | BufferingBody | BodyClosed


class DiagnosticReconstructor:
    """Single-pass state machine over compiler output lines.

    Every line fed in is emitted exactly once, in order. Lines are held back
    only while a multi-line diagnostic is in flight, and at most one is in
    flight at a time.
    """

    def __init__(self, parser: LineParser = parse_canonical_line) -> None:
        self.parser = parser
        self.state: ReconstructorState = Idle()

    @property
    def idle(self) -> bool:
        return isinstance(self.state, Idle)

    @property
    def pending(self) -> int:
        """Number of lines currently held back."""
        if isinstance(self.state, Idle):
            return 0
        return len(self.state.lines)

    def reset(self) -> None:
        self.state = Idle()

    def feed(self, line: DiagnosticLine) -> list[DiagnosticLine]:
        """Consume one line and return the lines it releases."""
        state = self.state
        if isinstance(state, Idle):
            return self._start(line)

        state.lines.append(line)
        if isinstance(state, BufferingBody):
            if line.text == "":
                # The blank separator itself does not count toward the body.
                self.state = BodyClosed(
                    lines=state.lines, body_line_count=len(state.lines) - 1
                )
            return []

        if not state.complete:
            return []
        self.state = Idle()
        return _rebuild(state.lines)

    def finish(self) -> list[DiagnosticLine]:
        """Release whatever is still buffered when the output stream ends."""
        if isinstance(self.state, Idle):
            return []
        lines = list(self.state.lines)
        LOGGER.debug("diagnostic_block_truncated", extra={"buffered_lines": len(lines)})
        self.state = Idle()
        return lines

    def reconstruct(self, lines: Iterable[DiagnosticLine]) -> Iterator[DiagnosticLine]:
        """Lazily normalize a whole stream, draining the buffer at its end."""
        for line in lines:
            yield from self.feed(line)
        yield from self.finish()

    def _start(self, line: DiagnosticLine) -> list[DiagnosticLine]:
        parts = self.parser(line.text)
        if parts is None or parts.has_column or not parts.has_line:
            return [line]
        self.state = BufferingBody(lines=[line])
        return []


def _rebuild(lines: list[DiagnosticLine]) -> list[DiagnosticLine]:
    header, *rest = lines
    caret_line = lines[-1].text
    caret_index = caret_line.find(CARET)
    location_end = header.text.find(LOCATION_END)
    if caret_index < 0 or location_end < 0:
        LOGGER.debug("diagnostic_block_unmatched", extra={"header": header.text})
        return list(lines)

    column = caret_index + 1
    text = f"{header.text[:location_end]},{column}{header.text[location_end:]}"
    return [DiagnosticLine(text=text, importance=header.importance), *rest]
