"""Compiler diagnostic parsing and normalization."""

from .canonical import NOT_SPECIFIED, CanonicalParts, parse_canonical_line
from .reconstructor import DiagnosticLine, DiagnosticReconstructor, Importance

__all__ = [
    "NOT_SPECIFIED",
    "CanonicalParts",
    "DiagnosticLine",
    "DiagnosticReconstructor",
    "Importance",
    "parse_canonical_line",
]
