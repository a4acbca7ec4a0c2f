"""Task-level log that turns compiler text output into build events."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from .diagnostics import NOT_SPECIFIED, DiagnosticLine, Importance, parse_canonical_line
from .diagnostics.reconstructor import LineParser

LOGGER = logging.getLogger(__name__)

EventKind = Literal["error", "warning", "message"]

_MESSAGE_LEVELS = {"high": logging.INFO, "normal": logging.INFO, "low": logging.DEBUG}


@dataclass(slots=True, frozen=True)
class LoggedEvent:
    """A single error, warning or message recorded for a compile."""

    kind: EventKind
    text: str
    importance: Importance = "normal"
    code: str = ""
    origin: str = ""
    line: int = NOT_SPECIFIED
    column: int = NOT_SPECIFIED


class TaskLog:
    """Collects the events of one compile and mirrors them to logging.

    When ``log_dir`` is set, each event is also appended as a JSON line to a
    dated ``compile-*.log`` file in that directory.
    """

    def __init__(
        self,
        *,
        task_name: str = "vbc",
        log_dir: str | Path | None = None,
        parser: LineParser = parse_canonical_line,
    ) -> None:
        self.task_name = task_name
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.parser = parser
        self.events: list[LoggedEvent] = []

    @property
    def has_logged_errors(self) -> bool:
        return any(event.kind == "error" for event in self.events)

    @property
    def errors(self) -> list[LoggedEvent]:
        return [event for event in self.events if event.kind == "error"]

    @property
    def warnings(self) -> list[LoggedEvent]:
        return [event for event in self.events if event.kind == "warning"]

    def log_line(self, line: DiagnosticLine) -> LoggedEvent:
        return self.log_text(line.text, line.importance)

    def log_text(self, text: str, importance: Importance = "normal") -> LoggedEvent:
        """Log one line of tool output, recognizing canonical diagnostics."""
        parts = self.parser(text)
        if parts is None:
            return self.log_message(text, importance)
        return self._record(
            LoggedEvent(
                kind=parts.category,
                text=parts.text,
                importance=importance,
                code=parts.code,
                origin=parts.origin,
                line=parts.line,
                column=parts.column,
            )
        )

    def log_message(self, text: str, importance: Importance = "normal") -> LoggedEvent:
        return self._record(LoggedEvent(kind="message", text=text, importance=importance))

    def log_error(self, text: str, *, code: str = "", origin: str = "") -> LoggedEvent:
        return self._record(
            LoggedEvent(kind="error", text=text, importance="high", code=code, origin=origin)
        )

    def log_warning(self, text: str, *, code: str = "", origin: str = "") -> LoggedEvent:
        return self._record(
            LoggedEvent(kind="warning", text=text, importance="high", code=code, origin=origin)
        )

    def _record(self, event: LoggedEvent) -> LoggedEvent:
        self.events.append(event)
        if event.kind == "error":
            level = logging.ERROR
        elif event.kind == "warning":
            level = logging.WARNING
        else:
            level = _MESSAGE_LEVELS[event.importance]
        LOGGER.log(
            level,
            f"compiler_{event.kind}",
            extra={
                "task": self.task_name,
                "code": event.code,
                "origin": event.origin,
                "line": event.line,
                "column": event.column,
                "text": event.text,
            },
        )
        self._append_log(event)
        return event

    def _append_log(self, event: LoggedEvent) -> None:
        if self.log_dir is None:
            return
        self.log_dir.mkdir(parents=True, exist_ok=True)
        day_file = self.log_dir / f"compile-{datetime.now(timezone.utc).date().isoformat()}.log"
        entry = {
            "log_version": 1,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "task": self.task_name,
            **asdict(event),
        }
        with day_file.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry) + "\n")
