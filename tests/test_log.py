from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from vbcdriver.log import TaskLog


def test_canonical_text_becomes_diagnostic_event() -> None:
    log = TaskLog()

    event = log.log_text("Module1.vb(3,13): error BC30451: 'y' is not declared.")

    assert event.kind == "error"
    assert (event.origin, event.line, event.column) == ("Module1.vb", 3, 13)
    assert event.code == "BC30451"
    assert log.has_logged_errors


def test_other_text_becomes_message() -> None:
    log = TaskLog()

    event = log.log_text("Microsoft (R) Visual Basic Compiler", "low")

    assert event.kind == "message"
    assert event.importance == "low"
    assert not log.has_logged_errors


def test_errors_and_warnings_are_separated() -> None:
    log = TaskLog()
    log.log_warning("careful")
    log.log_error("broken", code="BC1")
    log.log_message("hello")

    assert [event.text for event in log.warnings] == ["careful"]
    assert [event.code for event in log.errors] == ["BC1"]
    assert len(log.events) == 3


def test_events_are_mirrored_to_logging(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="vbcdriver.log"):
        TaskLog().log_text("a.vb(1,1): warning BC42024: Unused.")

    record = caplog.records[-1]
    assert record.getMessage() == "compiler_warning"
    assert record.levelno == logging.WARNING
    assert record.code == "BC42024"


def test_events_are_appended_to_day_file(tmp_path: Path) -> None:
    log = TaskLog(log_dir=tmp_path / "logs")
    log.log_error("broken")
    log.log_message("done")

    files = list((tmp_path / "logs").glob("compile-*.log"))
    assert len(files) == 1
    entries = [json.loads(line) for line in files[0].read_text(encoding="utf-8").splitlines()]
    assert [entry["kind"] for entry in entries] == ["error", "message"]
    assert entries[0]["task"] == "vbc"
    assert entries[0]["log_version"] == 1
