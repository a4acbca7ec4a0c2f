from __future__ import annotations

import pytest

from vbcdriver.diagnostics import NOT_SPECIFIED, parse_canonical_line


def test_parses_line_only_location() -> None:
    parts = parse_canonical_line("File.vb(10): error BC30451: 'y' is not declared.")

    assert parts is not None
    assert parts.category == "error"
    assert parts.origin == "File.vb"
    assert parts.line == 10
    assert parts.column == NOT_SPECIFIED
    assert parts.has_line and not parts.has_column
    assert parts.code == "BC30451"
    assert parts.text == "'y' is not declared."


def test_parses_drive_letter_origin_with_column() -> None:
    parts = parse_canonical_line(
        r"C:\src\Module1.vb(12,9): warning BC42024: Unused local variable: 'x'."
    )

    assert parts is not None
    assert parts.category == "warning"
    assert parts.origin == r"C:\src\Module1.vb"
    assert (parts.line, parts.column) == (12, 9)
    assert parts.text == "Unused local variable: 'x'."


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        ("4-6", (4, NOT_SPECIFIED, 6, NOT_SPECIFIED)),
        ("4,2-8", (4, 2, NOT_SPECIFIED, 8)),
        ("4,2,5,1", (4, 2, 5, 1)),
    ],
)
def test_parses_location_ranges(location: str, expected: tuple[int, int, int, int]) -> None:
    parts = parse_canonical_line(f"a.vb({location}): error BC1: x")

    assert parts is not None
    assert (parts.line, parts.column, parts.end_line, parts.end_column) == expected


def test_project_level_diagnostic_has_no_line() -> None:
    parts = parse_canonical_line("vbc : error BC2001: file 'Missing.vb' could not be found")

    assert parts is not None
    assert parts.origin == "vbc"
    assert parts.code == "BC2001"
    assert not parts.has_line


def test_origin_is_optional() -> None:
    parts = parse_canonical_line("error BC30420: 'Sub Main' was not found in 'App'.")

    assert parts is not None
    assert parts.origin == ""
    assert parts.code == "BC30420"
    assert parts.text == "'Sub Main' was not found in 'App'."


def test_category_is_case_insensitive() -> None:
    parts = parse_canonical_line("a.vb(1): Warning BC40056: Namespace is empty.")

    assert parts is not None
    assert parts.category == "warning"


@pytest.mark.parametrize(
    "line",
    [
        "",
        "Microsoft (R) Visual Basic Compiler version 4.0",
        "        Dim x As Integer = y",
        "                           ~",
        "a.vb(x,y): error BC1: bad location",
    ],
)
def test_non_diagnostic_lines_return_none(line: str) -> None:
    assert parse_canonical_line(line) is None
