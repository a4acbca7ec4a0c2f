from __future__ import annotations

import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from vbcdriver.host import HostCompiler, StrategyDecision, StrategyOutcome
from vbcdriver.log import TaskLog
from vbcdriver.options import CompileOptions
from vbcdriver.task import VbcTask
from vbcdriver.tool import ToolRunner

COMPILER_OUTPUT = (
    b"Microsoft (R) Visual Basic Compiler\r\n"
    b"Module1.vb(3): error BC30451: 'y' is not declared.\r\n"
    b"\r\n"
    b"        x = y\r\n"
    b"            ~\r\n"
)


class FakeHost(HostCompiler):
    def __init__(self, *, design_time: bool = False) -> None:
        self.design_time = design_time
        self.compiled = False

    def begin_initialization(self) -> None:
        pass

    def end_initialization(self) -> None:
        pass

    def is_design_time(self) -> bool:
        return self.design_time

    def is_up_to_date(self) -> bool:
        return False

    def compile(self) -> bool:
        self.compiled = True
        return True


def _options(**kwargs: object) -> CompileOptions:
    return CompileOptions(sources=["Module1.vb"], output_assembly="App.dll", **kwargs)  # type: ignore[arg-type]


def _fake_run(returncode: int, stdout: bytes = b"", calls: list[list[str]] | None = None):
    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        if calls is not None:
            calls.append(list(args[0]))  # type: ignore[arg-type]
        return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=b"")

    return fake_run


def test_tool_diagnostics_are_reported_with_columns(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(subprocess, "run", _fake_run(1, COMPILER_OUTPUT, calls))

    result = VbcTask(_options(), runner=ToolRunner("vbc")).execute()

    assert result.success is False
    assert result.outcome is StrategyOutcome.USE_EXTERNAL_TOOL
    assert result.used_command_line_tool is True
    assert calls == [["vbc", "/optionstrict:custom", "/out:App.dll", "Module1.vb"]]
    errors = [event for event in result.events if event.kind == "error"]
    assert len(errors) == 1
    assert (errors[0].origin, errors[0].line, errors[0].column) == ("Module1.vb", 3, 13)
    assert errors[0].text == "'y' is not declared."
    assert [event.text for event in result.events if event.kind == "message"] == [
        "Microsoft (R) Visual Basic Compiler",
        "",
        "        x = y",
        "            ~",
    ]


def test_successful_tool_run_moves_pdb(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assembly = tmp_path / "App.dll"
    generated = tmp_path / "App.pdb"

    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        assembly.write_bytes(b"MZ")
        generated.write_bytes(b"symbols")
        return SimpleNamespace(returncode=0, stdout=b"", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)
    options = CompileOptions(
        sources=["Module1.vb"],
        output_assembly=str(assembly),
        pdb_file=str(tmp_path / "symbols" / "App"),
    )
    (tmp_path / "symbols").mkdir()

    result = VbcTask(options, runner=ToolRunner("vbc")).execute()

    assert result.success is True
    assert result.pdb_path == tmp_path / "symbols" / "App.pdb"
    assert result.pdb_path.read_bytes() == b"symbols"


def test_nonzero_exit_without_diagnostics_is_an_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_run(3))

    result = VbcTask(_options(), runner=ToolRunner("vbc")).execute()

    assert result.success is False
    assert [event.text for event in result.events] == ["The compiler exited with code 3."]


def test_missing_tool_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = VbcTask(_options(), runner=ToolRunner("C:/missing/vbc.exe")).execute()

    assert result.success is False
    assert result.tool_result is not None
    assert result.tool_result.executed is False
    assert "Could not locate" in result.events[-1].text


def test_truncated_output_is_still_logged(monkeypatch: pytest.MonkeyPatch) -> None:
    output = b"Module1.vb(3): error BC30451: 'y' is not declared.\n\n        x = y\n"
    monkeypatch.setattr(subprocess, "run", _fake_run(1, output))

    result = VbcTask(_options(), runner=ToolRunner("vbc")).execute()

    assert [event.kind for event in result.events] == ["error", "message", "message"]
    assert result.events[0].line == 3
    assert result.events[0].column == 0


def test_invalid_options_fail_before_compiling(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(*args: object, **kwargs: object) -> SimpleNamespace:
        raise AssertionError("compiler should not run")

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = VbcTask(_options(verbosity="Loud"), runner=ToolRunner("vbc")).execute()

    assert result.success is False
    assert result.outcome is None
    assert "verbosity" in result.events[0].text


def test_host_compile_when_everything_is_supported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_run(0))
    host = FakeHost()

    result = VbcTask(
        _options(), host=host, use_host_compiler_if_available=True, parameters=[]
    ).execute()

    assert result.success is True
    assert result.outcome is StrategyOutcome.USE_HOST
    assert result.used_command_line_tool is False
    assert host.compiled is True


def test_free_threaded_host_entry_point_is_preferred() -> None:
    class FreeThreaded:
        def __init__(self) -> None:
            self.compiled = False

        def compile(self) -> bool:
            self.compiled = True
            return True

    free_threaded = FreeThreaded()
    host = FakeHost()
    host.get_free_threaded_host = lambda: free_threaded  # type: ignore[attr-defined]

    result = VbcTask(
        _options(), host=host, use_host_compiler_if_available=True, parameters=[]
    ).execute()

    assert result.success is True
    assert free_threaded.compiled is True
    assert host.compiled is False


def test_host_outcome_without_host_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    task = VbcTask(_options())
    monkeypatch.setattr(
        task, "select_strategy", lambda: StrategyDecision(StrategyOutcome.USE_HOST)
    )

    with pytest.raises(RuntimeError, match="without a host compiler"):
        task.execute()


def test_host_is_bypassed_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_run(0))
    host = FakeHost()

    result = VbcTask(_options(), host=host, parameters=[], runner=ToolRunner("vbc")).execute()

    assert result.outcome is StrategyOutcome.USE_EXTERNAL_TOOL
    assert host.compiled is False


def test_design_time_host_needs_no_compile() -> None:
    host = FakeHost(design_time=True)

    result = VbcTask(_options(), host=host, parameters=[]).execute()

    assert result.success is True
    assert result.outcome is StrategyOutcome.DONE_SUCCESS
    assert host.compiled is False


def test_host_output_bypasses_reconstruction() -> None:
    log = TaskLog()
    task = VbcTask(_options(), log=log)

    task.log_events_from_text_output("Module1.vb(3): error BC30451: 'y' is not declared.")

    assert log.errors[0].line == 3
    assert task.reconstructor.idle


def test_tool_output_without_markers_skips_reconstructor() -> None:
    log = TaskLog()
    task = VbcTask(_options(), log=log)
    task.used_command_line_tool = True

    task.log_events_from_text_output("Compiling 3 files")
    task.log_events_from_text_output("Module1.vb(3): warning BC42024: Unused.")

    assert [event.text for event in log.events] == ["Compiling 3 files"]
    assert task.reconstructor.pending == 1
