"""Parser for the canonical ``origin(line,column): category code: text`` form."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

Category = Literal["error", "warning"]

NOT_SPECIFIED = 0
"""Sentinel for a missing line or column; real positions are one-based."""

_CANONICAL_PATTERN = re.compile(
    r"""
    ^\s*
    (?:
        (?P<origin>(?:[A-Za-z]:)?[^:(]*?)
        (?:\((?P<location>[\d\s,\-]*)\))?
        \s*:\s*
    )?
    (?P<subcategory>[^:]*?\s)??
    (?P<category>error|warning)
    (?:\s+(?P<code>[^\s:]+))?
    \s*:
    (?P<text>.*)$
    """,
    re.IGNORECASE | re.VERBOSE,
)

_LOCATION_PATTERNS = (
    re.compile(r"^(?P<line>\d+)$"),
    re.compile(r"^(?P<line>\d+)-(?P<end_line>\d+)$"),
    re.compile(r"^(?P<line>\d+),(?P<column>\d+)$"),
    re.compile(r"^(?P<line>\d+),(?P<column>\d+)-(?P<end_column>\d+)$"),
    re.compile(r"^(?P<line>\d+),(?P<column>\d+),(?P<end_line>\d+),(?P<end_column>\d+)$"),
)


@dataclass(slots=True, frozen=True)
class CanonicalParts:
    """Pieces of one canonical diagnostic line."""

    category: Category
    origin: str
    line: int = NOT_SPECIFIED
    column: int = NOT_SPECIFIED
    end_line: int = NOT_SPECIFIED
    end_column: int = NOT_SPECIFIED
    subcategory: str = ""
    code: str = ""
    text: str = ""

    @property
    def has_line(self) -> bool:
        return self.line != NOT_SPECIFIED

    @property
    def has_column(self) -> bool:
        return self.column != NOT_SPECIFIED


def parse_canonical_line(line: str) -> CanonicalParts | None:
    """Parse ``line``; return ``None`` when it is not a canonical diagnostic.

    Recognized forms include ``File.vb(10): error BC30451: text``,
    ``File.vb(10,5): warning BC42024: text`` and origin-less project diagnostics
    such as ``vbc : error BC2001: text``.
    """
    match = _CANONICAL_PATTERN.match(line)
    if match is None:
        return None

    origin = (match.group("origin") or "").strip()
    positions: dict[str, int] = {}
    location = match.group("location")
    if location is not None:
        compact = re.sub(r"\s+", "", location)
        for pattern in _LOCATION_PATTERNS:
            located = pattern.match(compact)
            if located:
                positions = {
                    key: int(value) for key, value in located.groupdict().items() if value
                }
                break
        else:
            return None

    category = match.group("category").lower()
    return CanonicalParts(
        category="error" if category == "error" else "warning",
        origin=origin,
        subcategory=(match.group("subcategory") or "").strip(),
        code=match.group("code") or "",
        text=match.group("text").strip(),
        **positions,
    )
